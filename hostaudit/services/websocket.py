"""WebSocket connection manager for real-time audit progress."""

import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Fans progress messages for a job out to every socket watching it."""

    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.connections: Dict[str, List[WebSocket]] = {}
        self.broadcast_queue: asyncio.Queue[Tuple[str, str, int, str]] = asyncio.Queue()
        self._broadcast_task: asyncio.Task[None] | None = None
        self._queue_loop: asyncio.AbstractEventLoop | None = None
        self.loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def get_instance(cls) -> "WebSocketManager":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    async def connect(self, job_id: str, websocket: WebSocket) -> None:
        """Add WebSocket connection for a job."""
        with self._lock:
            self.connections.setdefault(job_id, []).append(websocket)
            if self.loop is None:
                self.loop = asyncio.get_running_loop()

    def disconnect(self, job_id: str, websocket: WebSocket) -> None:
        """Remove WebSocket connection for a job."""
        with self._lock:
            sockets = self.connections.get(job_id)
            if sockets is None:
                return
            if websocket in sockets:
                sockets.remove(websocket)
            if not sockets:
                del self.connections[job_id]

    def enqueue_broadcast(self, job_id: str, step: str, progress: int, status: str) -> None:
        """Enqueue a progress message; safe to call from any thread."""
        if self.loop and self.loop.is_running():
            asyncio.run_coroutine_threadsafe(
                self._enqueue_async(job_id, step, progress, status), self.loop
            )
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No event loop, dropping progress update for job {job_id}")
            return
        asyncio.create_task(self._enqueue_async(job_id, step, progress, status))

    async def _enqueue_async(self, job_id: str, step: str, progress: int, status: str) -> None:
        loop = asyncio.get_running_loop()
        if self._queue_loop is not loop:
            # asyncio queues are bound to the loop that first waits on them
            self.broadcast_queue = asyncio.Queue()
            self._queue_loop = loop
            self._broadcast_task = None
        await self.broadcast_queue.put((job_id, step, progress, status))
        if self._broadcast_task is None or self._broadcast_task.done():
            self._broadcast_task = asyncio.create_task(self._process_broadcasts())

    async def _process_broadcasts(self) -> None:
        """Drain queued messages until the queue stays empty for a second."""
        while True:
            try:
                job_id, step, progress, status = await asyncio.wait_for(
                    self.broadcast_queue.get(), timeout=1.0
                )
            except asyncio.TimeoutError:
                if self.broadcast_queue.empty():
                    break
                continue
            await self.broadcast(job_id, step, progress, status)

    async def broadcast(self, job_id: str, step: str, progress: int, status: str) -> None:
        """Send a progress message to all connected clients for a job."""
        message: Dict[str, Any] = {
            "step": step,
            "progress": progress,
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            sockets = list(self.connections.get(job_id, []))

        disconnected: List[WebSocket] = []
        for websocket in sockets:
            try:
                await websocket.send_json(message)
            except (RuntimeError, OSError) as e:
                logger.debug(f"Dropping socket for job {job_id}: {e!r}")
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(job_id, websocket)


# Global instance
websocket_manager = WebSocketManager.get_instance()
