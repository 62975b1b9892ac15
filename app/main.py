from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.http.health import router as health_router
from app.api.http.auth import router as auth_router
from app.api.http.issues import router as issues_router
from app.api.ws.sync import ConnectionManager, router as websocket_router
from app.core.config import Settings, settings as default_settings
from app.core.db import Database
from app.core.exceptions import StoreOperationFailure
from app.domains.issues.services import IssueService
from app.domains.issues.snapshot import SnapshotHub

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )

        database = Database(settings.database_url, echo=settings.database_echo)
        await database.create_all()

        hub = SnapshotHub()
        connections = ConnectionManager()
        # Единственная живая подписка на снимки на все время работы процесса
        hub.subscribe(connections.on_snapshot)

        app.state.database = database
        app.state.hub = hub
        app.state.connections = connections

        # Начальный снимок из хранилища
        async with database.session_factory() as session:
            await IssueService(session, hub).refresh_snapshot()

        logger.info(f"Issue tracker started with {len(hub.issues)} issues")
        try:
            yield
        finally:
            await database.dispose()

    app = FastAPI(
        title="Issue Tracker",
        description="Issue tracker with live snapshots and duplicate title warnings",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    # Настройка CORS для работы с frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreOperationFailure)
    async def store_failure_handler(request: Request, exc: StoreOperationFailure):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc), "operation": exc.operation}
        )

    # Подключаем роутеры
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(issues_router)
    app.include_router(websocket_router)

    @app.get("/")
    async def root():
        """Корневой эндпоинт"""
        return {
            "message": "Issue Tracker API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
            "live": "/ws/issues"
        }

    return app


app = create_app()
