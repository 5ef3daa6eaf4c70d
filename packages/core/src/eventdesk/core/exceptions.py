"""EventDesk Core 异常体系

Store 操作抛出带类型的异常，由展示层决定如何提示用户。
本模块中的异常都不会导致宿主进程崩溃。
"""


class EventDeskError(Exception):
    """Core 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可由调用方修正后重试
        """
        super().__init__(message)
        self.recoverable = recoverable


class NotFoundError(EventDeskError):
    """引用的活动或子项不存在"""

    def __init__(self, kind: str, entity_id: str, event_id: str | None = None) -> None:
        """
        Args:
            kind: 实体类型（event / guest / budget_item ...）
            entity_id: 未找到的标识
            event_id: 子项所属活动 ID（查找活动本身时为 None）
        """
        if event_id is None:
            message = f"{kind} not found: {entity_id}"
        else:
            message = f"{kind} not found: {entity_id} (event {event_id})"
        super().__init__(message)
        self.kind = kind
        self.entity_id = entity_id
        self.event_id = event_id


class DuplicateIdError(EventDeskError):
    """创建时标识已存在"""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} already exists: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class ValidationError(EventDeskError):
    """部分更新或输入数据不合法"""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidTransitionError(ValidationError):
    """活动状态流转不合法"""

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(
            f"Cannot transition from {from_status} to {to_status}",
            field="status",
        )
        self.from_status = from_status
        self.to_status = to_status


class GatewayError(EventDeskError):
    """持久化网关失败基类

    网关失败只会降级为"最近一次内存状态"，不会中断会话。
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Args:
            message: 错误描述
            original_error: 原始异常（数据库错误、JSON 解析错误等）
        """
        if original_error is not None:
            message = f"{message} -- {original_error}"
        super().__init__(message, recoverable=True)
        self.original_error = original_error


class LoadError(GatewayError):
    """读取活动集合失败（存储不可达或数据损坏）"""


class PersistError(GatewayError):
    """写入活动集合失败"""
