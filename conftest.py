"""全局 pytest 配置 -- 临时 SQLite 数据库 + 活动构造 fixture"""

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from eventdesk.core.models import Event, EventType


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """构造一个待审批的活动，字段可覆盖"""

    def _make(**overrides: Any) -> Event:
        data: dict[str, Any] = {
            "title": "TechXplore 2026: Annual Symposium",
            "event_type": EventType.TECHNICAL_SYMPOSIUM,
            "department": "CSE & IT",
            "event_date": date(2026, 11, 20),
            "time": "09:30 AM",
            "location": "Main Auditorium",
            "faculty_coordinator": "Dr. Robert Miller",
        }
        data.update(overrides)
        return Event(**data)

    return _make
