from types import SimpleNamespace

from app.core.settings import settings
from app.utils import idempotency
from app.utils.idempotency import IdempotencyCache


def test_expired_entries_are_swept_on_write(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(idempotency, "time", SimpleNamespace(time=lambda: clock[0]))
    monkeypatch.setattr(settings, "IDEMPOTENCY_TTL_SECONDS", 20)

    cache = IdempotencyCache(sweep_interval=30)
    for n in range(5):
        cache.set_success(f"k{n}", 201, b"{}", {})
    assert len(cache) == 5

    # vencidas, pero aún dentro del intervalo de barrido
    clock[0] += 25
    cache.set_success("late", 201, b"{}", {})
    assert len(cache) == 6
    assert cache.get("k0") is None

    clock[0] += 10
    cache.set_success("fresh", 201, b"{}", {})
    assert len(cache) == 2
    assert cache.get("late") is not None
    assert cache.get("fresh") is not None
