"""状态机流转单元测试

测试内容：
1. 合法流转通过
2. 非法流转被拒绝
3. 终态不可再流转
"""

import pytest
from eventdesk.core.models.enums import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    EventStatus,
    validate_transition,
)


class TestStateMachineTransitions:
    """状态机流转验证"""

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (EventStatus.DRAFT, EventStatus.PENDING_APPROVAL),
            (EventStatus.DRAFT, EventStatus.CANCELLED),
            (EventStatus.PENDING_APPROVAL, EventStatus.CONFIRMED),
            (EventStatus.PENDING_APPROVAL, EventStatus.CANCELLED),
            (EventStatus.CONFIRMED, EventStatus.UPCOMING),
            (EventStatus.CONFIRMED, EventStatus.ONGOING),
            (EventStatus.CONFIRMED, EventStatus.COMPLETED),
            (EventStatus.UPCOMING, EventStatus.ONGOING),
            (EventStatus.UPCOMING, EventStatus.COMPLETED),
            (EventStatus.ONGOING, EventStatus.COMPLETED),
            (EventStatus.ONGOING, EventStatus.CANCELLED),
        ],
    )
    def test_valid_transition(self, from_status: EventStatus, to_status: EventStatus):
        """合法流转应通过验证"""
        assert validate_transition(from_status, to_status) is True

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (EventStatus.DRAFT, EventStatus.CONFIRMED),
            (EventStatus.PENDING_APPROVAL, EventStatus.UPCOMING),
            (EventStatus.PENDING_APPROVAL, EventStatus.PENDING_APPROVAL),
            (EventStatus.UPCOMING, EventStatus.CONFIRMED),
            (EventStatus.ONGOING, EventStatus.UPCOMING),
        ],
    )
    def test_invalid_transition(self, from_status: EventStatus, to_status: EventStatus):
        """非法流转应被拒绝"""
        assert validate_transition(from_status, to_status) is False

    def test_all_terminal_states_cannot_transition(self):
        """所有终态都不能再流转"""
        for terminal in TERMINAL_STATES:
            for target in EventStatus:
                assert validate_transition(terminal, target) is False, (
                    f"终态 {terminal} 不应能流转到 {target}"
                )

    def test_cancel_reachable_from_every_non_terminal_state(self):
        for status in EventStatus:
            if status in TERMINAL_STATES:
                continue
            assert validate_transition(status, EventStatus.CANCELLED) is True

    def test_valid_transitions_completeness(self):
        """VALID_TRANSITIONS 覆盖所有状态"""
        for state in EventStatus:
            assert state in VALID_TRANSITIONS, f"{state} 未在 VALID_TRANSITIONS 中定义"
