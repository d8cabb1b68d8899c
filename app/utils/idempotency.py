from __future__ import annotations

import time
import threading
from typing import Dict, Tuple, Optional

from starlette.requests import Request
from starlette.responses import Response

from app.core.settings import settings

# (expires_at, status_code, body, headers)
CacheValue = Tuple[float, int, bytes, Dict[str, str]]


class IdempotencyCache:
    """
    Memo in-process de respuestas 2xx por clave. Una réplica por proceso:
    detrás de varios workers cada uno tiene su propia memoria.
    Las entradas vencidas se barren al escribir, como mucho cada `sweep_interval` segundos.
    """

    def __init__(self, sweep_interval: float = 60.0) -> None:
        self._store: Dict[str, CacheValue] = {}
        self._lock = threading.Lock()
        self._sweep_interval = sweep_interval
        self._next_sweep = 0.0

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _sweep(self, now: float) -> None:
        # llamar con el lock tomado
        if now < self._next_sweep:
            return
        for key in [k for k, v in self._store.items() if v[0] < now]:
            del self._store[key]
        self._next_sweep = now + self._sweep_interval

    def get(self, key: str) -> Optional[CacheValue]:
        now = time.time()
        with self._lock:
            v = self._store.get(key)
            if not v:
                return None
            if v[0] < now:
                self._store.pop(key, None)
                return None
            return v

    def set_success(self, key: str, status_code: int, body: bytes, headers: Dict[str, str]) -> None:
        ttl = float(getattr(settings, "IDEMPOTENCY_TTL_SECONDS", 0) or 0)
        now = time.time()
        exp = now + max(0.0, ttl)
        clean_headers: Dict[str, str] = {str(k): str(v) for k, v in (headers or {}).items()}
        with self._lock:
            self._sweep(now)
            self._store[key] = (exp, int(status_code), body, clean_headers)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


idempotency_cache = IdempotencyCache()


def _scoped_key(request: Request) -> Optional[str]:
    """
    La clave del cliente se acota a método + ruta + credencial, para que
    la misma Idempotency-Key en otra operación (u otro actor) no colisione.
    """
    if not getattr(settings, "IDEMPOTENCY_ENABLED", False):
        return None
    raw = request.headers.get("Idempotency-Key")
    if not raw:
        return None
    auth = request.headers.get("Authorization", "")
    return f"{request.method}:{request.url.path}:{hash(auth)}:{raw}"


def maybe_replay_idempotent(request: Request) -> Optional[Response]:
    """
    Si ya hay una respuesta exitosa memorizada para esta clave, la repite
    marcada con `Idempotent-Replay: true`.
    """
    key = _scoped_key(request)
    if not key:
        return None
    cached = idempotency_cache.get(key)
    if not cached:
        return None
    _, code, body, headers = cached
    resp = Response(content=body, status_code=code, media_type=headers.get("content-type", "application/json"))
    for k, v in headers.items():
        resp.headers[k] = v
    resp.headers["Idempotent-Replay"] = "true"
    return resp


def remember_idempotent_success(request: Request, response: Response) -> None:
    key = _scoped_key(request)
    if not key or not (200 <= int(response.status_code) < 300):
        return
    body = getattr(response, "body", None) or b""
    safe_names = {"content-type", "etag", "cache-control", "last-modified"}
    safe_headers = {k: v for k, v in response.headers.items() if k.lower() in safe_names}
    idempotency_cache.set_success(key, int(response.status_code), body, safe_headers)
