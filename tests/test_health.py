# tests/test_health.py
from typing import Any


def test_health(client: Any) -> None:
    """Liveness check answers without a database round-trip."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_root_describes_api(client: Any) -> None:
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["docs"] == "/docs"
