"""CLI 入口模块 -- python -m eventdesk.core <command>

支持的命令：
  list-events          列出全部活动
  reconcile-statuses   按日期对账活动状态
  summary <event_id>   查看单个活动的预算与人数汇总
"""

import asyncio
import sys
from datetime import date

from .config import get_collection_key, get_db_path
from .logging_config import setup_logging

USAGE = """用法: python -m eventdesk.core <command>
命令:
  list-events          列出全部活动
  reconcile-statuses   按日期对账活动状态
  summary <event_id>   查看单个活动的预算与人数汇总"""


def main(argv: list[str] | None = None) -> None:
    """CLI 主入口"""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(USAGE)
        sys.exit(1)

    command = args[0]

    if command == "list-events":
        asyncio.run(list_events())
    elif command == "reconcile-statuses":
        asyncio.run(reconcile_statuses())
    elif command == "summary" and len(args) == 2:
        found = asyncio.run(show_summary(args[1]))
        if not found:
            sys.exit(1)
    else:
        print(f"未知命令: {' '.join(args)}")
        print(USAGE)
        sys.exit(1)


async def _open_store():
    """打开 SQLite Gateway 并加载集合"""
    from .aggregate_store import EventAggregateStore
    from .store import create_gateway

    collection_key = get_collection_key()
    setup_logging(collection_key)
    gateway = await create_gateway(get_db_path(), collection_key)
    store = EventAggregateStore(gateway)
    await store.load()
    return gateway, store


async def list_events() -> None:
    """列出全部活动"""
    gateway, store = await _open_store()
    try:
        events = store.list_events()
        if not events:
            print("暂无活动")
        for event in events:
            print(f"{event.id}  {event.status.value:<17} {event.event_date.isoformat()}  {event.title}")
    finally:
        await gateway.close()


async def reconcile_statuses() -> None:
    """执行日期对账"""
    gateway, store = await _open_store()
    try:
        changed = await store.reconcile_statuses()
        for event in changed:
            print(f"{event.id}  -> {event.status.value}")
        print(f"对账完成，{len(changed)} 个活动状态已更新")
    finally:
        await gateway.close()


async def show_summary(event_id: str) -> bool:
    """打印预算与人数汇总；活动不存在返回 False"""
    from .derived import budget_summary, guest_stats
    from .schedule import time_remaining

    gateway, store = await _open_store()
    try:
        event = store.get(event_id)
        if event is None:
            print(f"活动不存在: {event_id}")
            return False

        budget = budget_summary(event)
        guests = guest_stats(event)
        print(f"{event.title} ({event.status.value}, {time_remaining(event.event_date, date.today())})")
        print(
            f"预算: 总额 {budget.total:.2f} / 已支出 {budget.spent:.2f} / "
            f"剩余 {budget.remaining:.2f} ({budget.utilization_percent}%)"
        )
        print(
            f"人数: 预估 {event.guest_count.estimated} / 已确认 {guests.confirmed} / "
            f"已到场 {guests.attended}"
        )
        return True
    finally:
        await gateway.close()


if __name__ == "__main__":
    main()
