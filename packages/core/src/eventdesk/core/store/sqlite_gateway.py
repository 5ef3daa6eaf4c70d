"""PersistenceGateway SQLite 实现

整个集合以 JSON 文本存入 collections 表的一行，按键整体覆盖写入。
"""

from datetime import UTC, datetime

import aiosqlite
import pydantic

from ..exceptions import LoadError, PersistError
from ..models.event import Event
from .codec import decode_events, encode_events


class SqliteGateway:
    """PersistenceGateway 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection, collection_key: str) -> None:
        self._conn = conn
        self._collection_key = collection_key

    @property
    def collection_key(self) -> str:
        return self._collection_key

    async def read_all(self) -> list[Event]:
        """读取整个集合；键不存在时返回空列表"""
        try:
            cursor = await self._conn.execute(
                "SELECT payload FROM collections WHERE key = ?",
                (self._collection_key,),
            )
            row = await cursor.fetchone()
        except (aiosqlite.Error, ValueError) as e:
            # ValueError: aiosqlite 连接已关闭
            raise LoadError(f"无法读取集合 {self._collection_key}", e) from e

        if row is None:
            return []

        try:
            return decode_events(row[0])
        except pydantic.ValidationError as e:
            raise LoadError(f"集合 {self._collection_key} 数据损坏", e) from e

    async def write_all(self, events: list[Event]) -> None:
        """序列化并覆盖写入整个集合

        注意：此方法自行提交事务。单条 upsert 失败时无需回滚，
        下一次整体覆盖写入会带上全部内容。
        """
        payload = encode_events(events)
        try:
            await self._conn.execute(
                """
                INSERT INTO collections (key, payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE
                SET payload = excluded.payload, updated_at = excluded.updated_at
                """,
                (self._collection_key, payload, datetime.now(UTC).isoformat()),
            )
            await self._conn.commit()
        except (aiosqlite.Error, ValueError) as e:
            # ValueError: aiosqlite 连接已关闭
            raise PersistError(f"无法写入集合 {self._collection_key}", e) from e

    async def close(self) -> None:
        """关闭底层连接"""
        await self._conn.close()
