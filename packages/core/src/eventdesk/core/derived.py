"""派生字段重算模块

每个派生字段对应一个纯函数，每次子项集合变化后从头重新计算，
不做增量维护（集合规模在数百条以内）。

- budget.spent          <- budget_items
- guest_count.confirmed <- guests
- timeline_items 排序   <- timeline_items

另外提供只读汇总（预算、人数、清单进度、风险暴露度），供展示层直接读取。
"""

from collections.abc import Callable, Iterable

from pydantic import BaseModel

from .models import (
    CONFIRMED_GUEST_STATES,
    BudgetItem,
    ChecklistItem,
    Event,
    Guest,
    GuestStatus,
    Risk,
    RiskLevel,
    RiskStatus,
    TimelineItem,
)


def compute_budget_spent(items: Iterable[BudgetItem]) -> float:
    """预算已支出 = 全部明细 actual_cost 之和（不区分是否已付款）"""
    return sum(item.actual_cost for item in items)


def compute_confirmed_guests(guests: Iterable[Guest]) -> int:
    """已确认人数 = 状态为 registered 或 attended 的嘉宾数"""
    return sum(1 for guest in guests if guest.status in CONFIRMED_GUEST_STATES)


def sort_timeline(items: Iterable[TimelineItem]) -> list[TimelineItem]:
    """按 HH:MM 字典序排序（稳定排序，同一时间保持插入顺序）"""
    return sorted(items, key=lambda item: item.time)


def _recompute_budget(event: Event) -> Event:
    spent = compute_budget_spent(event.budget_items)
    return event.model_copy(
        update={"budget": event.budget.model_copy(update={"spent": spent})}
    )


def _recompute_guest_count(event: Event) -> Event:
    confirmed = compute_confirmed_guests(event.guests)
    return event.model_copy(
        update={"guest_count": event.guest_count.model_copy(update={"confirmed": confirmed})}
    )


def _recompute_timeline(event: Event) -> Event:
    return event.model_copy(update={"timeline_items": sort_timeline(event.timeline_items)})


# 子项集合 -> 依赖它的派生字段重算函数
DERIVED_BY_COLLECTION: dict[str, Callable[[Event], Event]] = {
    "budget_items": _recompute_budget,
    "guests": _recompute_guest_count,
    "timeline_items": _recompute_timeline,
}


def recompute_derived(event: Event, collection: str) -> Event:
    """重算依赖指定子项集合的派生字段

    Args:
        event: 当前聚合
        collection: 发生变化的子项集合字段名

    Returns:
        新的 Event（原对象不变）；集合无派生字段时原样返回
    """
    recompute = DERIVED_BY_COLLECTION.get(collection)
    if recompute is None:
        return event
    return recompute(event)


def recompute_all(event: Event) -> Event:
    """重算全部派生字段（创建与加载时使用）"""
    for recompute in DERIVED_BY_COLLECTION.values():
        event = recompute(event)
    return event


# ============================================================
# 只读汇总
# ============================================================


class BudgetReport(BaseModel):
    """预算汇总视图"""

    total: float
    spent: float
    paid: float
    remaining: float
    utilization_percent: float
    over_budget: bool


class GuestStats(BaseModel):
    """人数统计视图"""

    total: int
    confirmed: int
    invited: int
    attended: int
    cancelled: int
    attendance_percent: float


class ChecklistProgress(BaseModel):
    """当日清单进度"""

    completed: int
    total: int
    percent: float


def _percent(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)


def budget_summary(event: Event) -> BudgetReport:
    """预算汇总：剩余 = 总额 - 已支出"""
    total = event.budget.total
    spent = event.budget.spent
    return BudgetReport(
        total=total,
        spent=spent,
        paid=sum(item.paid for item in event.budget_items),
        remaining=total - spent,
        utilization_percent=_percent(spent, total),
        over_budget=spent > total,
    )


def guest_stats(event: Event) -> GuestStats:
    """人数统计；到场率以已确认人数为分母"""
    counts = {status: 0 for status in GuestStatus}
    for guest in event.guests:
        counts[guest.status] += 1
    confirmed = event.guest_count.confirmed
    return GuestStats(
        total=len(event.guests),
        confirmed=confirmed,
        invited=counts[GuestStatus.INVITED],
        attended=counts[GuestStatus.ATTENDED],
        cancelled=counts[GuestStatus.CANCELLED],
        attendance_percent=_percent(counts[GuestStatus.ATTENDED], confirmed),
    )


def checklist_progress(items: list[ChecklistItem]) -> ChecklistProgress:
    completed = sum(1 for item in items if item.is_completed)
    return ChecklistProgress(
        completed=completed,
        total=len(items),
        percent=_percent(completed, len(items)),
    )


_RISK_WEIGHTS: dict[RiskLevel, int] = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
}


def risk_score(risk: Risk) -> int:
    """风险暴露度 = 概率权重 x 影响权重（1..9）"""
    return _RISK_WEIGHTS[risk.probability] * _RISK_WEIGHTS[risk.impact]


def open_risks_by_exposure(risks: Iterable[Risk]) -> list[Risk]:
    """未关闭风险，按暴露度从高到低排序"""
    open_risks = [risk for risk in risks if risk.status == RiskStatus.OPEN]
    return sorted(open_risks, key=risk_score, reverse=True)
