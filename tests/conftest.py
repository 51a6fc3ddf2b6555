"""Pytest configuration and fixtures."""

import os
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

# Keep tests off the real database and the real LLM unless a test opts in
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["LLM_PROVIDER"] = "gemini"
os.environ["LLM_API_KEY"] = ""

import pytest  # noqa: E402

from src.api.dependencies import get_app_settings  # noqa: E402
from src.application.ledger_session import LedgerSession  # noqa: E402
from src.application.services import reset_services  # noqa: E402
from src.config import reset_settings  # noqa: E402
from src.core.entities import Brand  # noqa: E402
from src.core.services import LedgerEngine  # noqa: E402
from src.infrastructure.llm import reset_providers  # noqa: E402
from src.infrastructure.storage.memory_store import InMemoryKeyValueStore  # noqa: E402
from src.infrastructure.storage.sqlite import reset_kv_store  # noqa: E402


class StepClock:
    """Deterministic clock: each reading is one second after the previous."""

    def __init__(
        self,
        start: datetime = datetime(2024, 3, 1, 9, 0, tzinfo=UTC),
        step: timedelta = timedelta(seconds=1),
    ):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


class SequentialIds:
    """Deterministic id factory: id-1, id-2, ..."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"


def _reset_all() -> None:
    reset_settings()
    reset_services()
    reset_kv_store()
    reset_providers()
    get_app_settings.cache_clear()


@pytest.fixture(autouse=True)
def _isolated_singletons() -> Iterator[None]:
    """Every test starts with fresh settings and no cached services."""
    _reset_all()
    yield
    _reset_all()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def engine(clock: StepClock, ids: SequentialIds) -> LedgerEngine:
    """Empty engine with deterministic time and ids."""
    return LedgerEngine(clock=clock, id_factory=ids)


@pytest.fixture
def stocked_engine(engine: LedgerEngine) -> LedgerEngine:
    """Engine holding a small mixed inventory."""
    engine.add_battery(Brand.MOURA, 60, quantity=3, min_stock=2, price=450.0)
    engine.add_battery(Brand.HELIAR, 45, quantity=1, min_stock=2, price=380.0)
    engine.add_battery(Brand.MOURA, 150, quantity=4, min_stock=1, price=1200.0)
    engine.add_battery(Brand.PIONEIRO, 60, quantity=0, min_stock=0, alert_enabled=False)
    return engine


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
async def session(memory_store: InMemoryKeyValueStore) -> LedgerSession:
    """Loaded session over an empty in-memory store."""
    ledger = LedgerSession(memory_store, default_scrap_price=4.20)
    await ledger.load()
    return ledger
