"""Event 聚合根模型

一个活动及其全部子项集合构成一致性边界。
budget.spent 与 guest_count.confirmed 是派生字段，
只能由 derived 模块根据子项集合重新计算，不接受外部直接赋值。
"""

from datetime import UTC, date, datetime
from typing import Annotated, Any

from pydantic import Field, StringConstraints, field_validator

from .base import CamelModel, new_id
from .contacts import Guest, Staff, Vendor, Venue
from .enums import LEGACY_STATUS_ALIASES, EventStatus, EventType
from .planning import BudgetItem, ChecklistItem, Risk, TimelineItem


def utc_now() -> datetime:
    """当前 UTC 时间"""
    return datetime.now(UTC)


class BudgetSummary(CamelModel):
    """预算汇总"""

    total: float = Field(default=0, ge=0, description="预算总额")
    spent: float = Field(default=0, description="派生：预算明细 actual_cost 之和")


class GuestCountSummary(CamelModel):
    """人数汇总"""

    estimated: int = Field(default=0, ge=0, description="预估人数")
    confirmed: int = Field(default=0, description="派生：已报名 + 已到场人数")


class Event(CamelModel):
    """Event 聚合根"""

    id: str = Field(default_factory=new_id, description="唯一标识")
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = Field(
        description="活动标题（去除首尾空白后非空）"
    )
    event_type: EventType = Field(default=EventType.OTHER, description="活动类型")
    department: str = Field(default="", description="主办院系/社团")
    event_date: date = Field(alias="date", description="活动日期")
    time: str = Field(default="", description="开始时间（展示用）")
    location: str = ""
    description: str = ""
    objectives: str = ""
    outcomes: str = ""
    faculty_coordinator: str = ""
    registration_deadline: datetime | None = None
    max_participants: int | None = Field(default=None, ge=1, description="报名人数上限")
    organizer_name: str | None = None
    organizer_contact: str | None = None
    poster_url: str | None = Field(default=None, description="海报地址或 data URL")
    feedback_url: str | None = Field(default=None, description="活动反馈表单链接")
    status: EventStatus = Field(default=EventStatus.PENDING_APPROVAL, description="当前状态")
    is_approved: bool = False
    budget: BudgetSummary = Field(default_factory=BudgetSummary)
    guest_count: GuestCountSummary = Field(default_factory=GuestCountSummary)

    budget_items: list[BudgetItem] = Field(default_factory=list)
    timeline_items: list[TimelineItem] = Field(default_factory=list)
    venues: list[Venue] = Field(default_factory=list)
    vendors: list[Vendor] = Field(default_factory=list)
    staff: list[Staff] = Field(default_factory=list)
    guests: list[Guest] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
    day_of_checklist: list[ChecklistItem] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now, description="创建时间")
    updated_at: datetime = Field(default_factory=utc_now, description="更新时间")

    @field_validator("status", mode="before")
    @classmethod
    def upgrade_legacy_status(cls, value: Any) -> Any:
        """浏览器版本的旧状态值（planning / past）映射到当前状态机"""
        if isinstance(value, str):
            return LEGACY_STATUS_ALIASES.get(value, value)
        return value


# 子项集合字段 -> 子项模型，store 的通用增删改依赖此映射
NESTED_COLLECTIONS: dict[str, type[CamelModel]] = {
    "budget_items": BudgetItem,
    "timeline_items": TimelineItem,
    "venues": Venue,
    "vendors": Vendor,
    "staff": Staff,
    "guests": Guest,
    "risks": Risk,
    "day_of_checklist": ChecklistItem,
}

# 部分更新不可触碰的字段：子项集合只能经由具名操作修改
PROTECTED_FIELDS: frozenset[str] = frozenset({*NESTED_COLLECTIONS, "created_at", "updated_at"})
