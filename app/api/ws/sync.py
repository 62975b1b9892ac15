from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple
import json
import logging
import uuid

from app.core.exceptions import AuthError, StoreOperationFailure, TransitionError
from app.domains.identity.services import IdentityService
from app.domains.issues.duplicates import find_similar
from app.domains.issues.entities import Issue, IssueStatus
from app.domains.issues.services import IssueService
from app.domains.issues.view import IssueFilter, IssueView

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class LiveConnection:
    websocket: WebSocket
    user_email: str
    view: IssueView


class ConnectionManager:
    """Живые подключения клиентов и рассылка им отрисованных снимков.

    Менеджер - единственный подписчик SnapshotHub: при каждом новом снимке
    представление каждого клиента пересчитывается под его фильтр.
    """

    def __init__(self):
        # Хранилище активных соединений: {connection_id: LiveConnection}
        self.active_connections: Dict[str, LiveConnection] = {}

    async def connect(self, websocket: WebSocket, user_email: str, issues: Sequence[Issue], version: int) -> str:
        """Подключение клиента и отправка текущего снимка"""
        await websocket.accept()
        connection_id = str(uuid.uuid4())

        view = IssueView()
        view.on_snapshot(issues, version)
        self.active_connections[connection_id] = LiveConnection(websocket, user_email, view)
        logger.info(f"WebSocket accepted for user {user_email} as {connection_id}")

        await websocket.send_text(json.dumps({
            "type": "connected",
            "data": {
                "connection_id": connection_id,
                "user": user_email,
                "active_connections": self.count()
            }
        }))
        await websocket.send_text(json.dumps(view.as_message()))
        return connection_id

    def disconnect(self, connection_id: str):
        """Отключение клиента"""
        connection = self.active_connections.pop(connection_id, None)
        if connection:
            logger.info(f"User {connection.user_email} disconnected ({connection_id})")

    def count(self) -> int:
        return len(self.active_connections)

    async def send(self, connection_id: str, message: dict):
        connection = self.active_connections.get(connection_id)
        if connection:
            await connection.websocket.send_text(json.dumps(message))

    async def on_snapshot(self, issues: Tuple[Issue, ...], version: int):
        """Рассылка нового снимка всем клиентам, каждому под его фильтр"""
        disconnected = []

        for connection_id, connection in list(self.active_connections.items()):
            connection.view.on_snapshot(issues, version)
            try:
                await connection.websocket.send_text(json.dumps(connection.view.as_message()))
            except Exception as e:
                logger.warning(f"Failed to push snapshot v{version} to {connection_id}: {e}")
                disconnected.append(connection_id)

        # Удаляем отключенных клиентов
        for connection_id in disconnected:
            self.disconnect(connection_id)


async def handle_status_change(websocket: WebSocket, connection_id: str, data: dict):
    """Смена статуса задачи; при запрещенном переходе запись не выполняется"""
    app = websocket.app
    manager: ConnectionManager = app.state.connections

    try:
        issue_uuid = uuid.UUID(str(data.get("issue_id")))
        requested = IssueStatus(data.get("status"))
    except ValueError as e:
        await manager.send(connection_id, {"type": "error", "data": {"message": str(e)}})
        return

    async with app.state.database.session_factory() as session:
        issue_service = IssueService(
            session, app.state.hub, min_title_length=app.state.settings.duplicate_min_title_length
        )
        try:
            issue = await issue_service.change_status(issue_uuid, requested)
        except TransitionError as e:
            await manager.send(connection_id, {
                "type": "transition_rejected",
                "data": {
                    "issue_id": str(issue_uuid),
                    "reason": e.reason,
                    "status": e.current.value,
                    "requested": e.requested.value
                }
            })
            return
        except StoreOperationFailure as e:
            await manager.send(connection_id, {"type": "error", "data": {"message": str(e)}})
            return

    if issue is None:
        await manager.send(connection_id, {"type": "error", "data": {"message": "Issue not found"}})


@router.websocket("/ws/issues")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket эндпоинт живой ленты задач"""
    app = websocket.app
    manager: ConnectionManager = app.state.connections
    hub = app.state.hub

    token = websocket.query_params.get("token", "")
    async with app.state.database.session_factory() as session:
        try:
            user = await IdentityService(session, app.state.settings).get_current_user_from_token(token)
        except AuthError as e:
            logger.info(f"Rejected WebSocket connection: {e}")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    connection_id = await manager.connect(websocket, user.identity, hub.issues, hub.version)

    try:
        while True:
            # Получаем сообщение от клиента
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                message = None

            if not isinstance(message, dict):
                await manager.send(connection_id, {"type": "error", "data": {"message": "Invalid message"}})
                continue

            message_type = message.get("type")
            data = message.get("data")
            if not isinstance(data, dict):
                data = {}

            if message_type == "filter":
                try:
                    issue_filter = IssueFilter.parse(data.get("status"), data.get("priority"))
                except ValueError as e:
                    await manager.send(connection_id, {"type": "error", "data": {"message": str(e)}})
                    continue
                view = manager.active_connections[connection_id].view
                view.set_filter(issue_filter)
                await manager.send(connection_id, view.as_message())

            elif message_type == "check_title":
                title = data.get("title")
                similar = find_similar(title, hub.issues, min_length=app.state.settings.duplicate_min_title_length)
                await manager.send(connection_id, {
                    "type": "similar",
                    "data": {
                        "title": title,
                        "issues": [
                            {
                                "uuid": str(issue.uuid),
                                "title": issue.title,
                                "status": issue.status.value,
                                "priority": issue.priority.value
                            }
                            for issue in similar
                        ]
                    }
                })

            elif message_type == "status_change":
                await handle_status_change(websocket, connection_id, data)

            elif message_type == "ping":
                # Ответ на ping для поддержания соединения
                await manager.send(connection_id, {"type": "pong"})

            else:
                await manager.send(connection_id, {
                    "type": "error",
                    "data": {"message": f"Unknown message type: {message_type}"}
                })

    except WebSocketDisconnect:
        manager.disconnect(connection_id)

    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        manager.disconnect(connection_id)
        raise
