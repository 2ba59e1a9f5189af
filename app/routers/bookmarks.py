"""Live bookmark list over a WebSocket."""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.config import get_settings
from app.services import platform_client
from app.services.exceptions import BookmarkError
from app.sync import BookmarkView

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _snapshot(view: BookmarkView) -> dict:
    return {
        "type": "bookmarks",
        "stale": view.stale,
        "items": [
            {
                "id": b.id,
                "url": b.url,
                "title": b.title,
                "created_at": b.created_at.isoformat(),
                "user_id": b.user_id,
            }
            for b in view.bookmarks
        ],
    }


async def _read_commands(websocket: WebSocket, view: BookmarkView) -> None:
    """Apply add/remove commands until the client goes away."""
    try:
        while True:
            message = await websocket.receive_json()
            action = message.get("action")
            if action == "add":
                ok = await view.add(message.get("title", ""), message.get("url", ""))
            elif action == "remove":
                ok = await view.remove(str(message.get("id", "")))
            else:
                ok = False
            await websocket.send_json({"type": "result", "action": action, "ok": ok})
    except WebSocketDisconnect:
        return


@router.websocket("/ws")
async def live_bookmarks(websocket: WebSocket):
    """Follow the signed-in user's bookmarks.

    Sends a ``bookmarks`` snapshot on connect and after every change the
    view reconciles, and a ``result`` message for each command.
    """
    token = websocket.cookies.get(settings.session_cookie_name)
    identity = None
    if token:
        try:
            identity = await platform_client.get_identity(token)
        except BookmarkError as e:
            logger.warning("Session lookup failed: %s", e)
    if identity is None:
        await websocket.close(code=1008)
        return

    await websocket.accept()
    changed = asyncio.Event()

    async with websocket.app.state.backend.open_view(identity) as view:
        view.on_change(changed.set)
        await websocket.send_json(_snapshot(view))

        reader = asyncio.create_task(_read_commands(websocket, view))
        try:
            while not reader.done():
                waiter = asyncio.create_task(changed.wait())
                done, _ = await asyncio.wait(
                    {reader, waiter}, return_when=asyncio.FIRST_COMPLETED
                )
                if waiter in done:
                    changed.clear()
                    await websocket.send_json(_snapshot(view))
                else:
                    waiter.cancel()
        finally:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
