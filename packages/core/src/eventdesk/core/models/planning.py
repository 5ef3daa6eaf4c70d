"""策划类子项模型 -- 预算、日程、风险、当日清单

子项由所属活动独占，不含回指父活动的字段。
"""

from datetime import date

from pydantic import Field

from .base import CamelModel, new_id
from .enums import RiskLevel, RiskStatus

# 零填充 24 小时制，保证字符串字典序即时间顺序
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class BudgetItem(CamelModel):
    """预算明细"""

    id: str = Field(default_factory=new_id, description="子项 ID，活动内唯一")
    category: str = Field(description="支出类别")
    description: str = Field(default="", description="支出说明")
    estimated_cost: float = Field(default=0, ge=0, description="预估金额")
    actual_cost: float = Field(default=0, ge=0, description="实际金额")
    paid: float = Field(default=0, ge=0, description="已付金额")
    is_paid: bool = Field(default=False, description="是否已结清")
    due_date: date | None = Field(default=None, description="付款截止日")
    proof_ref: str | None = Field(default=None, description="付款凭证引用")


class TimelineItem(CamelModel):
    """活动日程条目"""

    id: str = Field(default_factory=new_id)
    time: str = Field(pattern=TIME_OF_DAY_PATTERN, description="开始时间 HH:MM")
    title: str
    description: str = ""
    duration: int = Field(default=0, ge=0, description="时长（分钟）")
    assignee: str | None = None


class Risk(CamelModel):
    """风险登记"""

    id: str = Field(default_factory=new_id)
    title: str
    probability: RiskLevel = RiskLevel.LOW
    impact: RiskLevel = RiskLevel.LOW
    mitigation_plan: str = ""
    status: RiskStatus = RiskStatus.OPEN


class ChecklistItem(CamelModel):
    """活动当日检查清单"""

    id: str = Field(default_factory=new_id)
    task: str = Field(min_length=1)
    time: str | None = None
    assignee: str | None = None
    is_completed: bool = False
