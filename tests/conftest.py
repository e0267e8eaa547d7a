"""Pytest fixtures: temp SQLite database, scripted model client, pipeline builder."""
import asyncio
import json
import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from credit_pipeline.db.base import Base
from credit_pipeline.db.config import DBConfig
from credit_pipeline.db.session import init_db
from credit_pipeline.llm.settings import LLMSettings
from credit_pipeline.llm.types import LLMResponse
from credit_pipeline.queue.factory import build_pipeline
from credit_pipeline.queue.settings import QueueSettings
from credit_pipeline.queue.store import SqlJobStore
from credit_pipeline.ratelimit.settings import RateLimitSettings

# Import models so Base.metadata has all tables
import credit_pipeline.db.models  # noqa: F401


def result_json(score=712, **overrides) -> str:
    data = {
        "overview": {"score": score, "summary": "Fair file", "positiveFactors": ["on-time"], "negativeFactors": []},
        "disputes": {"items": []},
        "creditHacks": {"recommendations": []},
        "creditCards": {"recommendations": []},
        "sideHustles": {"recommendations": []},
    }
    data.update(overrides)
    return json.dumps(data)


class ScriptedClient:
    """LLMClientPort fake. Each script entry is a reply string, an exception, or a callable(req)."""

    def __init__(self, script=None, *, default=None, delay_s: float = 0.0) -> None:
        self.script = list(script or [])
        self.default = default
        self.delay_s = delay_s
        self.requests = []

    async def acompletion(self, model, req, *, timeout_s, api_base=None, api_key=None):
        self.requests.append(req)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        step = self.script.pop(0) if self.script else self.default
        if callable(step) and not isinstance(step, type):
            step = step(req)
        if isinstance(step, BaseException):
            raise step
        if step is None:
            raise AssertionError("ScriptedClient ran out of replies")
        return LLMResponse(text=step, model=model, latency_ms=1)

    @property
    def calls(self) -> int:
        return len(self.requests)


class StepClock:
    """Deterministic UTC clock advancing one second per call."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def temp_db_url() -> str:
    """SQLite URL for a temporary file (WAL-friendly)."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield f"sqlite:///{path}"
    for suffix in ("", "-wal", "-shm"):
        try:
            os.unlink(path + suffix)
        except OSError:
            pass


@pytest.fixture
def db_config(temp_db_url: str) -> DBConfig:
    """DBConfig pointing to temp SQLite file."""
    return DBConfig(db_url=temp_db_url, echo_sql=False)


@pytest.fixture
def db(db_config: DBConfig):
    """Module-level session factory bound to a fresh schema."""
    engine = init_db(db_config)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(db) -> SqlJobStore:
    return SqlJobStore(clock=StepClock())


@pytest.fixture
def queue_settings() -> QueueSettings:
    return QueueSettings(
        max_concurrent_jobs=2,
        poll_interval_s=0.05,
        retry_backoff_base_s=0.0,
        retry_backoff_max_s=0.0,
    )


@pytest.fixture
def make_pipeline(store, queue_settings):
    def _make(client, **kwargs):
        kwargs.setdefault("queue_settings", queue_settings)
        kwargs.setdefault("llm_settings", LLMSettings(api_key="test-key", model="test-model"))
        kwargs.setdefault(
            "rate_limit_settings",
            RateLimitSettings(capacity=100, refill_per_interval=100, interval_ms=1000, poll_interval_ms=10),
        )
        return build_pipeline(client=client, store=store, **kwargs)

    return _make


@pytest.fixture
def scripted_client():
    return ScriptedClient


@pytest.fixture
def make_result():
    return result_json
