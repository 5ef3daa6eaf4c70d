"""PersistenceGateway 内存实现

与浏览器 localStorage 行为一致：按键保存序列化后的字符串。
用于测试和演示；进程退出后数据丢失。
"""

import pydantic

from ..exceptions import LoadError
from ..models.event import Event
from .codec import decode_events, encode_events


class InMemoryGateway:
    """键值内存存储"""

    def __init__(self, collection_key: str, initial_blob: str | None = None) -> None:
        self._collection_key = collection_key
        self._blobs: dict[str, str] = {}
        if initial_blob is not None:
            self._blobs[collection_key] = initial_blob

    @property
    def collection_key(self) -> str:
        return self._collection_key

    @property
    def blob(self) -> str | None:
        """当前键下的原始序列化内容"""
        return self._blobs.get(self._collection_key)

    async def read_all(self) -> list[Event]:
        blob = self.blob
        if blob is None:
            return []
        try:
            return decode_events(blob)
        except pydantic.ValidationError as e:
            raise LoadError(f"集合 {self._collection_key} 数据损坏", e) from e

    async def write_all(self, events: list[Event]) -> None:
        self._blobs[self._collection_key] = encode_events(events)
