"""EventDesk Core Store -- 活动集合持久化网关

提供工厂函数创建基于 SQLite 的 Gateway 实例。
"""

from pathlib import Path

import aiosqlite

from ..config import get_collection_key
from .codec import decode_events, encode_events
from .memory_gateway import InMemoryGateway
from .protocols import PersistenceGateway
from .sqlite_gateway import SqliteGateway
from .sqlite_init import init_db, verify_wal_mode


async def create_gateway(
    db_path: str,
    collection_key: str | None = None,
) -> SqliteGateway:
    """创建 SQLite Gateway

    Args:
        db_path: SQLite 数据库文件路径
        collection_key: 集合持久化键，默认读取配置

    Returns:
        已初始化数据库的 SqliteGateway 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    return SqliteGateway(conn, collection_key or get_collection_key())


__all__ = [
    "PersistenceGateway",
    "SqliteGateway",
    "InMemoryGateway",
    "create_gateway",
    "init_db",
    "verify_wal_mode",
    "encode_events",
    "decode_events",
]
