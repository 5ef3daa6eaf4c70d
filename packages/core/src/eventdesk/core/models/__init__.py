"""EventDesk Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .base import CamelModel, new_id
from .contacts import Coordinates, Guest, Staff, Vendor, Venue
from .enums import (
    CONFIRMED_GUEST_STATES,
    EVENT_TYPE_LABELS,
    LEGACY_STATUS_ALIASES,
    TERMINAL_STATES,
    UNSCHEDULED_STATES,
    VALID_TRANSITIONS,
    EventStatus,
    EventType,
    GuestStatus,
    RiskLevel,
    RiskStatus,
    StaffStatus,
    VendorStatus,
    VenueStatus,
    validate_transition,
)
from .event import (
    NESTED_COLLECTIONS,
    PROTECTED_FIELDS,
    BudgetSummary,
    Event,
    GuestCountSummary,
    utc_now,
)
from .planning import BudgetItem, ChecklistItem, Risk, TimelineItem

__all__ = [
    # 枚举
    "EventStatus",
    "EventType",
    "EVENT_TYPE_LABELS",
    "VenueStatus",
    "VendorStatus",
    "StaffStatus",
    "GuestStatus",
    "CONFIRMED_GUEST_STATES",
    "RiskLevel",
    "RiskStatus",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "UNSCHEDULED_STATES",
    "LEGACY_STATUS_ALIASES",
    "validate_transition",
    # Event 聚合
    "Event",
    "BudgetSummary",
    "GuestCountSummary",
    "NESTED_COLLECTIONS",
    "PROTECTED_FIELDS",
    # 子项
    "BudgetItem",
    "TimelineItem",
    "Risk",
    "ChecklistItem",
    "Venue",
    "Coordinates",
    "Vendor",
    "Staff",
    "Guest",
    # 工具
    "CamelModel",
    "new_id",
    "utc_now",
]
