from sqlalchemy.ext.asyncio import AsyncSession
import uuid
import logging

from app.core.config import Settings
from app.core.exceptions import AuthError
from app.core.security import create_access_token, verify_token
from app.db.repositories.user_repository import UserRepository
from app.domains.identity.entities import User
from app.domains.identity.schemas import UserCreate, UserLogin

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Incorrect email or password"
INVALID_TOKEN = "Could not validate credentials"


class IdentityService:
    """Сервис для работы с идентификацией и аутентификацией пользователей"""

    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.user_repository = UserRepository(session)

    async def register_user(self, user_data: UserCreate) -> User:
        """Регистрация нового пользователя"""
        if await self.user_repository.email_exists(user_data.email.lower()):
            raise ValueError("Email already registered")

        user = User.create_user(email=user_data.email, password=user_data.password)
        created = await self.user_repository.create(user)
        logger.info(f"Registered user {created.email}")
        return created

    async def authenticate_user(self, login_data: UserLogin) -> User:
        """Аутентификация пользователя"""
        user = await self.user_repository.get_by_email(login_data.email.lower())

        if not user or not user.is_active or not user.authenticate(login_data.password):
            raise AuthError(INVALID_CREDENTIALS)

        return user

    async def login_user(self, login_data: UserLogin) -> str:
        """Вход пользователя и создание JWT токена"""
        user = await self.authenticate_user(login_data)

        token_data = {
            "sub": str(user.uuid),
            "email": user.email
        }
        return create_access_token(data=token_data, settings=self.settings)

    async def get_current_user_from_token(self, token: str) -> User:
        """Получение текущего пользователя из JWT токена"""
        payload = verify_token(token, self.settings)
        if not payload or not payload.get("sub"):
            raise AuthError(INVALID_TOKEN)

        try:
            user_uuid = uuid.UUID(payload["sub"])
        except ValueError:
            raise AuthError(INVALID_TOKEN)

        user = await self.user_repository.get_by_uuid(user_uuid)
        if user is None or not user.is_active:
            raise AuthError(INVALID_TOKEN)

        return user
