"""日期驱动的活动状态对账

由调用方显式触发（store.reconcile_statuses），不做后台定时。
"""

from datetime import date

from .models import (
    UNSCHEDULED_STATES,
    Event,
    EventStatus,
    validate_transition,
)


def scheduled_status(event_date: date, today: date) -> EventStatus:
    """根据活动日期与今天的比较得出日程状态"""
    if event_date < today:
        return EventStatus.COMPLETED
    if event_date > today:
        return EventStatus.UPCOMING
    return EventStatus.ONGOING


def reconcile_status(event: Event, today: date) -> EventStatus | None:
    """计算单个活动的对账目标状态

    仅处理已审批且处于 confirmed/upcoming/ongoing 的活动。

    Returns:
        需要流转到的新状态；无需变更或流转不合法时返回 None
    """
    if not event.is_approved or event.status in UNSCHEDULED_STATES:
        return None

    target = scheduled_status(event.event_date, today)
    if target == event.status:
        return None
    if not validate_transition(event.status, target):
        # 例如 ongoing 的活动被改期到未来：不回退
        return None
    return target


def time_remaining(event_date: date, today: date) -> str:
    """活动倒计时文案"""
    if event_date < today:
        return "Past Event"
    days = (event_date - today).days
    if days == 0:
        return "Happening Today"
    if days == 1:
        return "Tomorrow"
    return f"{days} days left"
