"""packages/core 测试配置 -- 核心层 fixture"""

import asyncio
import random
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from eventdesk.core.aggregate_store import EventAggregateStore
from eventdesk.core.exceptions import LoadError, PersistError
from eventdesk.core.models import Event
from eventdesk.core.store import InMemoryGateway, SqliteGateway, create_gateway

TEST_COLLECTION_KEY = "test-events"


class FlakyGateway(InMemoryGateway):
    """可注入读写失败的内存 Gateway"""

    def __init__(self) -> None:
        super().__init__(TEST_COLLECTION_KEY)
        self.fail_reads = False
        self.fail_writes = False
        self.write_attempts = 0

    async def read_all(self) -> list[Event]:
        if self.fail_reads:
            raise LoadError("storage unreachable")
        return await super().read_all()

    async def write_all(self, events: list[Event]) -> None:
        self.write_attempts += 1
        if self.fail_writes:
            raise PersistError("quota exceeded")
        await super().write_all(events)


class SlowGateway(InMemoryGateway):
    """写入前让出事件循环，用于模拟并发写入交错"""

    async def write_all(self, events: list[Event]) -> None:
        await asyncio.sleep(0)
        await super().write_all(events)


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway(TEST_COLLECTION_KEY)


@pytest.fixture
def store(gateway: InMemoryGateway) -> EventAggregateStore:
    """注入内存 Gateway 的 store（随机数固定种子）"""
    return EventAggregateStore(gateway, rng=random.Random(7))


@pytest.fixture
def flaky_gateway() -> FlakyGateway:
    return FlakyGateway()


@pytest.fixture
def slow_gateway() -> SlowGateway:
    return SlowGateway(TEST_COLLECTION_KEY)


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "sqlite" / "core_test.db"


@pytest_asyncio.fixture
async def sqlite_gateway(core_db_path: Path) -> AsyncGenerator[SqliteGateway, None]:
    """核心层已初始化的 SQLite Gateway"""
    gw = await create_gateway(str(core_db_path), TEST_COLLECTION_KEY)
    yield gw
    await gw.close()
