"""
Websocket bridge for the change feed

Clients connect to /ws/sessions/{session_id}?token=... and receive one JSON
message per row-level change in that session. Events are hints; clients
re-fetch groups and submissions over HTTP.
"""
import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from audition import state
from audition.services.auth import resolve_token


router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)

POLICY_VIOLATION = 4401


@router.websocket("/ws/sessions/{session_id}")
async def session_changes(websocket: WebSocket, session_id: str):
    identity = resolve_token(websocket.query_params.get("token", ""))
    if identity is None or identity.session_id != session_id:
        logger.warning(f"⚠️ Rejected websocket for session {session_id}: invalid token")
        await websocket.close(code=POLICY_VIOLATION)
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    subscription = state.FEED.subscribe(
        session_id, lambda event: loop.call_soon_threadsafe(queue.put_nowait, event)
    )

    await websocket.accept()
    await websocket.send_json({"type": "subscribed", "session_id": session_id})
    logger.info(f"📡 Websocket open for session {session_id} ({identity.role})")

    async def pump():
        while True:
            event = await queue.get()
            await websocket.send_json({"type": "change", **event.model_dump(mode="json")})

    sender = asyncio.create_task(pump())
    try:
        while True:
            # Client messages are ignored; receiving detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"🔌 Websocket closed for session {session_id}")
    finally:
        sender.cancel()
        subscription.close()
