"""枚举定义

包含 EventStatus 状态机、活动类型 EventType 及各子项状态枚举，
以及 VALID_TRANSITIONS 合法流转映射和 TERMINAL_STATES 终态集合。
"""

from enum import StrEnum


class EventStatus(StrEnum):
    """活动状态机"""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending-approval"
    CONFIRMED = "confirmed"

    # 以下三个状态由日期驱动的对账流程推进
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"

    CANCELLED = "cancelled"


VALID_TRANSITIONS: dict[EventStatus, set[EventStatus]] = {
    EventStatus.DRAFT: {EventStatus.PENDING_APPROVAL, EventStatus.CANCELLED},
    EventStatus.PENDING_APPROVAL: {EventStatus.CONFIRMED, EventStatus.CANCELLED},
    EventStatus.CONFIRMED: {
        EventStatus.UPCOMING,
        EventStatus.ONGOING,
        EventStatus.COMPLETED,
        EventStatus.CANCELLED,
    },
    EventStatus.UPCOMING: {
        EventStatus.ONGOING,
        EventStatus.COMPLETED,
        EventStatus.CANCELLED,
    },
    EventStatus.ONGOING: {EventStatus.COMPLETED, EventStatus.CANCELLED},
    # 终态不可再流转
    EventStatus.COMPLETED: set(),
    EventStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[EventStatus] = {
    EventStatus.COMPLETED,
    EventStatus.CANCELLED,
}

# 日期对账不处理的状态（未审批或已终结）
UNSCHEDULED_STATES: set[EventStatus] = {
    EventStatus.DRAFT,
    EventStatus.PENDING_APPROVAL,
    *TERMINAL_STATES,
}

# 浏览器版本持久化数据中的旧状态值 -> 当前状态
LEGACY_STATUS_ALIASES: dict[str, EventStatus] = {
    "planning": EventStatus.CONFIRMED,
    "past": EventStatus.COMPLETED,
}


class EventType(StrEnum):
    """校园活动类型"""

    TECHNICAL_SYMPOSIUM = "technical-symposium"
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    CULTURAL_FEST = "cultural-fest"
    SPORTS_MEET = "sports-meet"
    HACKATHON = "hackathon"
    CONFERENCE = "conference"
    CLUB_ACTIVITY = "club-activity"
    ORIENTATION = "orientation"
    PLACEMENT_DRIVE = "placement-drive"
    NSS_SOCIAL_SERVICE = "nss-social-service"
    ALUMNI_MEET = "alumni-meet"
    FAREWELL_FRESHERS = "farewell-freshers"
    ACADEMIC_EVENT = "academic-event"
    OTHER = "other"


EVENT_TYPE_LABELS: dict[EventType, str] = {
    EventType.TECHNICAL_SYMPOSIUM: "Technical Symposium",
    EventType.WORKSHOP: "Workshop / Hands-on Training",
    EventType.SEMINAR: "Seminar / Guest Lecture",
    EventType.CULTURAL_FEST: "Cultural Fest",
    EventType.SPORTS_MEET: "Sports Meet",
    EventType.HACKATHON: "Hackathon",
    EventType.CONFERENCE: "Conference",
    EventType.CLUB_ACTIVITY: "Club Activity",
    EventType.ORIENTATION: "Orientation / Induction",
    EventType.PLACEMENT_DRIVE: "Placement Drive",
    EventType.NSS_SOCIAL_SERVICE: "NSS / Social Service",
    EventType.ALUMNI_MEET: "Alumni Meet",
    EventType.FAREWELL_FRESHERS: "Farewell / Freshers Day",
    EventType.ACADEMIC_EVENT: "Academic Event",
    EventType.OTHER: "Other",
}


class VenueStatus(StrEnum):
    """场地洽谈状态"""

    POTENTIAL = "potential"
    CONTACTED = "contacted"
    VISITED = "visited"
    BOOKED = "booked"
    REJECTED = "rejected"


class VendorStatus(StrEnum):
    """供应商洽谈状态"""

    POTENTIAL = "potential"
    CONTACTED = "contacted"
    BOOKED = "booked"
    REJECTED = "rejected"


class StaffStatus(StrEnum):
    """工作人员确认状态"""

    PENDING = "pending"
    CONFIRMED = "confirmed"


class GuestStatus(StrEnum):
    """嘉宾/参与者状态"""

    INVITED = "invited"
    REGISTERED = "registered"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


# 计入 guest_count.confirmed 的状态，所有读取路径共用此定义
CONFIRMED_GUEST_STATES: frozenset[GuestStatus] = frozenset(
    {GuestStatus.REGISTERED, GuestStatus.ATTENDED}
)


class RiskLevel(StrEnum):
    """风险等级（概率 / 影响共用）"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskStatus(StrEnum):
    """风险处置状态"""

    OPEN = "open"
    MITIGATED = "mitigated"
    OCCURRED = "occurred"


def validate_transition(from_status: EventStatus, to_status: EventStatus) -> bool:
    """验证状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_status, set())
    return to_status in allowed
