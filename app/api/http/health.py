from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Проверка работоспособности сервиса"""
    hub = request.app.state.hub
    return {
        "status": "ok",
        "snapshot_version": hub.version,
        "issues": len(hub.issues),
        "live_connections": request.app.state.connections.count()
    }
