"""Persistence Gateway Protocol 接口定义

整个活动集合序列化为一个 blob，存放在固定键下。
使用 Python Protocol 实现结构化子类型（duck typing），便于测试替身注入。
"""

from typing import Protocol

from ..models.event import Event


class PersistenceGateway(Protocol):
    """活动集合持久化接口

    只支持整体覆盖写入，不支持局部 patch。
    """

    @property
    def collection_key(self) -> str:
        """集合持久化键"""
        ...

    async def read_all(self) -> list[Event]:
        """读取整个集合；键不存在时返回空列表

        Raises:
            LoadError: 存储不可达或数据损坏
        """
        ...

    async def write_all(self, events: list[Event]) -> None:
        """序列化并覆盖写入整个集合

        Raises:
            PersistError: 写入失败
        """
        ...
