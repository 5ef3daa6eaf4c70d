"""集成测试共享 fixture -- 基于临时 SQLite 文件的完整 Store"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest_asyncio
from eventdesk.core.aggregate_store import EventAggregateStore
from eventdesk.core.store import SqliteGateway, create_gateway

INTEGRATION_COLLECTION_KEY = "integration-events"


@pytest_asyncio.fixture
async def open_store(
    tmp_db_path: Path,
) -> AsyncGenerator[Callable[[], Awaitable[EventAggregateStore]], None]:
    """打开（或模拟重启后重新打开）同一数据库上的 Store

    每次调用建立新连接并加载集合；测试结束时统一关闭。
    """
    gateways: list[SqliteGateway] = []

    async def _open() -> EventAggregateStore:
        gateway = await create_gateway(str(tmp_db_path), INTEGRATION_COLLECTION_KEY)
        gateways.append(gateway)
        store = EventAggregateStore(gateway)
        await store.load()
        return store

    yield _open

    for gateway in gateways:
        await gateway.close()


@pytest_asyncio.fixture
async def sqlite_store(open_store) -> EventAggregateStore:
    """已加载的 SQLite Store"""
    return await open_store()
