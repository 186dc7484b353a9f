"""WebSocket endpoint for real-time audit progress."""

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from hostaudit.api.v1.deps import get_job_store
from hostaudit.services.jobs import JobStore
from hostaudit.services.websocket import websocket_manager

router = APIRouter()


@router.websocket("/audit/{job_id}")
async def audit_websocket(
    websocket: WebSocket,
    job_id: str,
    job_store: JobStore = Depends(get_job_store),  # noqa: B008
):
    """Stream progress messages for a job until the client disconnects."""
    job = job_store.get_job(job_id)
    if not job:
        await websocket.close(code=1008)  # Policy violation
        return

    await websocket.accept()
    await websocket_manager.connect(job_id, websocket)

    try:
        # Broadcast-only; incoming messages are ignored
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        websocket_manager.disconnect(job_id, websocket)
