"""
Rate limiting en memoria por ventana fija.

Pensado para proteger el login de fuerza bruta en una sola instancia.
Con varias replicas cada proceso lleva su propia cuenta.
"""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request


DEFAULT_IDENTIFIER = "anonymous"


@dataclass
class RateLimitInfo:
    """Resultado de consultar un bucket."""
    ok: bool
    limit: int
    remaining: int
    reset: float  # epoch en segundos

    def headers(self, now: Optional[float] = None) -> Dict[str, str]:
        """Cabeceras x-ratelimit-* (y retry-after si se bloqueo)."""
        current = time.time() if now is None else now
        headers = {
            "x-ratelimit-limit": str(self.limit),
            "x-ratelimit-remaining": str(max(0, self.remaining)),
            "x-ratelimit-reset": str(math.ceil(self.reset)),
        }
        if not self.ok:
            headers["retry-after"] = str(self.retry_after(current))
        return headers

    def retry_after(self, now: Optional[float] = None) -> int:
        current = time.time() if now is None else now
        return max(0, math.ceil(self.reset - current))


class RateLimiter:
    """
    Contador por clave `<prefix>:<identificador>` con ventana fija.

    Uso:
        limiter = RateLimiter(limit=10, window_seconds=60, prefix="login")
        info = limiter.hit(get_request_fingerprint(request))
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        prefix: str = "global",
        clock: Callable[[], float] = time.time,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix.strip() or "global"
        self._clock = clock
        self._buckets: Dict[str, Dict[str, float]] = {}
        self._next_prune = 0.0
        self._lock = threading.Lock()

    def hit(self, identifier: str) -> RateLimitInfo:
        """Registra un intento y devuelve el estado del bucket."""
        now = self._clock()
        key = f"{self.prefix}:{identifier.strip() or DEFAULT_IDENTIFIER}"

        with self._lock:
            if now >= self._next_prune:
                self._prune(now)
            bucket = self._buckets.get(key)
            if bucket is None or bucket["reset"] <= now:
                reset = now + self.window_seconds
                self._buckets[key] = {"count": 1, "reset": reset}
                return RateLimitInfo(True, self.limit, max(0, self.limit - 1), reset)

            if bucket["count"] >= self.limit:
                return RateLimitInfo(False, self.limit, 0, bucket["reset"])

            bucket["count"] += 1
            return RateLimitInfo(
                True, self.limit, max(0, self.limit - int(bucket["count"])), bucket["reset"]
            )

    def _prune(self, now: float) -> None:
        """Descarta los buckets caducados. Se ejecuta como mucho una vez por ventana."""
        expired = [key for key, bucket in self._buckets.items() if bucket["reset"] <= now]
        for key in expired:
            del self._buckets[key]
        self._next_prune = now + self.window_seconds

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def reset(self) -> None:
        """Vacia todos los buckets (tests / cambios de configuracion)."""
        with self._lock:
            self._buckets.clear()


def get_request_fingerprint(request: Request) -> str:
    """
    Identifica al cliente por IP: x-forwarded-for (primer salto),
    x-real-ip, cf-connecting-ip o la IP del socket.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return DEFAULT_IDENTIFIER
