"""模型基类 -- Python 侧 snake_case，序列化侧 camelCase

持久化的 JSON 保持浏览器版本的字段形状（budgetItems、actualCost ...）。
模型不可变：所有修改经由 model_copy(update=...) 生成新对象。
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from ulid import ULID


def new_id() -> str:
    """生成新的实体标识（ULID，时间有序）"""
    return str(ULID())


class CamelModel(BaseModel):
    """字段别名自动转换为 camelCase，同时接受 Python 字段名"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
