"""
Canal Server-Sent Events.

Por ahora solo emite un heartbeat de comentario (`: ping <iso>`) cada
SSE_HEARTBEAT_SECONDS para mantener viva la conexion a traves de proxies.
"""
import asyncio
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from loguru import logger

from fitdash.api.v1.dependencies.auth_deps import require_user
from fitdash.core.config import settings
from fitdash.domain.entities.session_user import SessionUser
from fitdash.shared.utils.datetime_utils import DateTimeUtils


router = APIRouter(prefix="/events", tags=["Events"])

SSE_HEADERS = {
    "cache-control": "no-cache, no-transform",
    "connection": "keep-alive",
    "x-accel-buffering": "no",
}


def format_ping() -> str:
    return f": ping {DateTimeUtils.now_utc().isoformat()}\n\n"


async def heartbeat_stream(
    request: Request,
    interval: float,
    max_beats: Optional[int] = None,
) -> AsyncIterator[str]:
    """
    Emite un ping por intervalo hasta que el cliente se desconecta
    (o se alcanzan `max_beats`).
    """
    beats = 0
    while max_beats is None or beats < max_beats:
        if await request.is_disconnected():
            break
        yield format_ping()
        beats += 1
        if max_beats is not None and beats >= max_beats:
            break
        await asyncio.sleep(interval)


@router.get("/stream")
async def stream_events(
    request: Request,
    user: SessionUser = Depends(require_user),
):
    logger.debug(f"SSE abierto para {user.id}")
    return StreamingResponse(
        heartbeat_stream(request, settings.SSE_HEARTBEAT_SECONDS),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
