"""集合序列化 -- JSON 数组，camelCase 字段，时间戳 ISO-8601

所有 Gateway 实现共用同一套编解码，保证 write_all -> read_all 结构相等。
"""

from pydantic import TypeAdapter

from ..models.event import Event

_EVENTS_ADAPTER = TypeAdapter(list[Event])


def encode_events(events: list[Event]) -> str:
    """序列化活动集合"""
    return _EVENTS_ADAPTER.dump_json(events, by_alias=True).decode("utf-8")


def decode_events(payload: str | bytes) -> list[Event]:
    """反序列化活动集合

    Raises:
        pydantic.ValidationError: JSON 非法或字段不符合模型
    """
    return _EVENTS_ADAPTER.validate_json(payload)
