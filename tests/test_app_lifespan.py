from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import main
from core.config import Settings
from core.errors import MigrationError


class _Recorder:
    def __init__(self) -> None:
        self.events: list[str] = []


@pytest.fixture()
def recorder(monkeypatch: pytest.MonkeyPatch) -> _Recorder:
    rec = _Recorder()

    class FakePostgres:
        def __init__(self, dsn: str, **kwargs) -> None:
            rec.events.append("postgres.init")

        async def connect(self) -> None:
            rec.events.append("postgres.connect")

        async def close(self) -> None:
            rec.events.append("postgres.close")

    class FakeCache:
        def __init__(self, url: str, **kwargs) -> None:
            pass

        async def connect(self) -> None:
            rec.events.append("cache.connect")

        async def close(self) -> None:
            rec.events.append("cache.close")

    class FakeRegistryClient:
        def __init__(self, base_url: str, **kwargs) -> None:
            pass

        async def close(self) -> None:
            rec.events.append("registry.close")

    class FakeScheduler:
        def __init__(self, tick, **kwargs) -> None:
            self.kwargs = kwargs

        def start(self) -> None:
            rec.events.append("scheduler.start")

        async def stop(self) -> None:
            rec.events.append("scheduler.stop")

    async def fake_apply_pending(postgres, directory) -> list[str]:
        rec.events.append("migrations")
        return []

    monkeypatch.setattr(main, "Postgres", FakePostgres)
    monkeypatch.setattr(main, "Cache", FakeCache)
    monkeypatch.setattr(main, "RegistryClient", FakeRegistryClient)
    monkeypatch.setattr(main, "RegistrationScheduler", FakeScheduler)
    monkeypatch.setattr(main.migrations, "apply_pending", fake_apply_pending)
    return rec


def test_startup_and_shutdown_order(settings: Settings, recorder: _Recorder) -> None:
    app = main.create_app(settings)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert app.state.scheduler.kwargs == {
            "interval_s": settings.registration_interval_s,
            "shutdown_grace_s": settings.registry_timeout_s,
        }

    assert recorder.events == [
        "postgres.init",
        "postgres.connect",
        "migrations",
        "cache.connect",
        "scheduler.start",
        "scheduler.stop",
        "registry.close",
        "cache.close",
        "postgres.close",
    ]


def test_migration_failure_prevents_serving(
    settings: Settings,
    recorder: _Recorder,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def broken(postgres, directory) -> list[str]:
        raise MigrationError("Failed to apply migrations: syntax error")

    monkeypatch.setattr(main.migrations, "apply_pending", broken)
    app = main.create_app(settings)

    with pytest.raises(MigrationError):
        with TestClient(app):
            pass

    assert "scheduler.start" not in recorder.events
    assert "postgres.close" in recorder.events


def test_run_exits_on_missing_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BINDING_ADDRESS", "BINDING_PORT", "POSTGRES_URL"):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(SystemExit) as exc_info:
        main.run()

    assert exc_info.value.code == 1
