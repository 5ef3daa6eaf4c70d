"""EventAggregateStore -- 会话内活动聚合的唯一数据源

职责：
1. 持有活动集合（dict 按 id 索引，保持插入顺序）
2. 所有修改经由具名操作完成，修改后同步重算派生字段并刷新 updated_at
3. 每次修改后把整个集合写入 PersistenceGateway

持久化策略：
- 所有修改都 await 写入；写入经 asyncio.Lock 串行化，快照在锁内获取，
  因此落盘内容总是最新的内存状态
- 写入失败只记录日志并标记 pending，内存状态仍为准；
  下一次修改（或 flush()）会整体重写集合，自动带上未落盘的变更
- 集合未成功加载前（从未 load 或 load 失败），首次写入前先重新读取
  持久化集合并合并；读取仍失败则拒绝写入，已落盘的数据不会被覆盖
"""

import asyncio
import random
from collections.abc import Mapping
from datetime import date
from typing import Any, TypeVar

import pydantic
import structlog

from .config import REGISTRATION_ID_MAX_ATTEMPTS, REGISTRATION_ID_PREFIX
from .derived import recompute_all, recompute_derived
from .exceptions import (
    DuplicateIdError,
    EventDeskError,
    InvalidTransitionError,
    LoadError,
    NotFoundError,
    PersistError,
    ValidationError,
)
from .models import (
    NESTED_COLLECTIONS,
    PROTECTED_FIELDS,
    BudgetItem,
    CamelModel,
    ChecklistItem,
    Event,
    EventStatus,
    Guest,
    GuestStatus,
    Risk,
    Staff,
    TimelineItem,
    Vendor,
    Venue,
    utc_now,
    validate_transition,
)
from .schedule import reconcile_status
from .store.protocols import PersistenceGateway

log = structlog.get_logger()

M = TypeVar("M", bound=CamelModel)

# 子项集合字段 -> 错误信息与日志中的实体类型名
_ITEM_KINDS: dict[str, str] = {
    "budget_items": "budget_item",
    "timeline_items": "timeline_item",
    "venues": "venue",
    "vendors": "vendor",
    "staff": "staff",
    "guests": "guest",
    "risks": "risk",
    "day_of_checklist": "checklist_item",
}


def _describe(error: pydantic.ValidationError) -> ValidationError:
    """将 pydantic 校验错误转换为领域 ValidationError（取第一条）"""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return ValidationError(f"{field}: {first['msg']}" if field else first["msg"], field=field)


def _coerce(model: type[M], value: M | Mapping[str, Any]) -> M:
    """接受模型实例或映射，返回独立的模型实例"""
    if isinstance(value, model):
        return value.model_copy(deep=True)
    try:
        return model.model_validate(value)
    except pydantic.ValidationError as e:
        raise _describe(e) from e


def _normalize_fields(model: type[CamelModel], fields: Mapping[str, Any]) -> dict[str, Any]:
    """部分更新的键统一为 Python 字段名（同时接受 camelCase 别名）

    Raises:
        ValidationError: 存在未知字段
    """
    by_alias = {info.alias: name for name, info in model.model_fields.items() if info.alias}
    normalized: dict[str, Any] = {}
    for key, value in fields.items():
        name = by_alias.get(key, key)
        if name not in model.model_fields:
            raise ValidationError(f"Unknown field: {key}", field=key)
        normalized[name] = value
    return normalized


def _merge(model: type[M], current: M, fields: dict[str, Any]) -> M:
    """合并部分字段并重新校验整条记录"""
    if "id" in fields and fields["id"] != current.id:
        raise ValidationError("Identifier cannot be changed", field="id")
    data = current.model_dump()
    data.update(fields)
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise _describe(e) from e


def _check_registration_id(guests: list[Guest], candidate: Guest) -> None:
    """非空报名编号在活动内唯一（不区分大小写，与签到匹配规则一致）

    Raises:
        DuplicateIdError: 其他嘉宾已使用同一报名编号
    """
    wanted = candidate.registration_id.strip().upper()
    if not wanted:
        return
    for guest in guests:
        if guest.id != candidate.id and guest.registration_id.strip().upper() == wanted:
            raise DuplicateIdError("registration", candidate.registration_id)


class EventAggregateStore:
    """活动聚合存储

    通过构造函数注入 PersistenceGateway，不使用进程级单例。
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        rng: random.Random | None = None,
    ) -> None:
        self._gateway = gateway
        self._rng = rng or random.Random()
        self._events: dict[str, Event] = {}
        self._persist_lock = asyncio.Lock()
        self._pending_write = False
        # 内存集合是否已包含持久化集合的全部内容
        self._synced = False
        self.last_error: EventDeskError | None = None

    @property
    def has_pending_write(self) -> bool:
        """是否存在尚未成功落盘的变更"""
        return self._pending_write

    # ============================================================
    # 活动级操作
    # ============================================================

    async def load(self) -> list[Event]:
        """从 Gateway 加载整个集合

        加载失败时不抛出：记录 last_error，内存集合置空并返回空列表。
        此后的修改只保留在内存，直到能重新读取并合并持久化集合。
        不做示例数据播种。
        """
        try:
            events = await self._gateway.read_all()
        except LoadError as e:
            self._events = {}
            self._synced = False
            self.last_error = e
            await log.awarning(
                "events_load_failed",
                collection_key=self._gateway.collection_key,
                error=str(e),
            )
            return []

        # 派生字段以子项集合为准，不信任持久化中的旧值
        self._events = {event.id: recompute_all(event) for event in events}
        self._synced = True
        self._pending_write = False
        self.last_error = None
        await log.ainfo(
            "events_loaded",
            collection_key=self._gateway.collection_key,
            event_count=len(self._events),
        )
        return self.list_events()

    async def create(self, event: Event | Mapping[str, Any]) -> Event:
        """创建活动

        Raises:
            DuplicateIdError: id 已存在（原活动保持不变）
            ValidationError: 映射输入校验失败
        """
        new_event = _coerce(Event, event)
        if new_event.id in self._events:
            raise DuplicateIdError("event", new_event.id)

        stored = recompute_all(new_event.model_copy(update={"updated_at": utc_now()}))
        self._events[stored.id] = stored
        log.info("event_created", event_id=stored.id, title=stored.title)
        await self._persist()
        return stored

    async def update(self, event_id: str, fields: Mapping[str, Any]) -> Event:
        """部分更新活动字段

        子项集合不能经由此方法修改；budget / guest_count 按键合并，
        其派生部分（spent / confirmed）总是重新计算。

        Raises:
            NotFoundError: 活动不存在（集合保持不变）
            ValidationError: 未知字段、受保护字段、移除 id/title、字段值非法
            InvalidTransitionError: 状态流转不合法
        """
        current = self._require_event(event_id)
        changes = _normalize_fields(Event, fields)

        protected = sorted(set(changes) & PROTECTED_FIELDS)
        if protected:
            raise ValidationError(
                f"Field cannot be updated directly: {protected[0]}",
                field=protected[0],
            )
        if "title" in changes and (changes["title"] is None or not str(changes["title"]).strip()):
            raise ValidationError("Event title is required", field="title")
        if "status" in changes:
            self._check_status_change(current, changes["status"])

        for summary in ("budget", "guest_count"):
            value = changes.get(summary)
            if isinstance(value, Mapping):
                current_summary = getattr(current, summary).model_dump()
                changes[summary] = {**current_summary, **value}

        changes["updated_at"] = utc_now()
        updated = recompute_all(_merge(Event, current, changes))
        self._events[event_id] = updated
        log.info("event_updated", event_id=event_id, fields=sorted(fields))
        await self._persist()
        return updated

    async def delete(self, event_id: str) -> None:
        """删除活动及其全部子项；幂等，不存在时什么也不做"""
        if self._events.pop(event_id, None) is None:
            log.debug("event_delete_noop", event_id=event_id)
            return
        log.info("event_deleted", event_id=event_id)
        await self._persist()

    def get(self, event_id: str) -> Event | None:
        """按 id 查询活动，不存在返回 None"""
        return self._events.get(event_id)

    def list_events(self) -> list[Event]:
        """全部活动（插入顺序）"""
        return list(self._events.values())

    async def flush(self) -> bool:
        """重试未落盘的变更

        Returns:
            True 如果当前没有待写入变更
        """
        if not self._pending_write:
            return True
        return await self._persist()

    # ============================================================
    # 状态流转
    # ============================================================

    async def submit_for_approval(self, event_id: str) -> Event:
        """草稿提交审批：draft -> pending-approval"""
        return await self._transition(event_id, EventStatus.PENDING_APPROVAL)

    async def approve(self, event_id: str) -> Event:
        """管理员审批通过：pending-approval -> confirmed"""
        return await self._transition(event_id, EventStatus.CONFIRMED, is_approved=True)

    async def reject(self, event_id: str) -> Event:
        """管理员驳回：pending-approval -> cancelled"""
        event = self._require_event(event_id)
        if event.status != EventStatus.PENDING_APPROVAL:
            raise InvalidTransitionError(event.status, EventStatus.CANCELLED)
        return await self._transition(event_id, EventStatus.CANCELLED, is_approved=False)

    async def cancel(self, event_id: str) -> Event:
        """取消活动（任意非终态）"""
        return await self._transition(event_id, EventStatus.CANCELLED)

    async def reconcile_statuses(self, today: date | None = None) -> list[Event]:
        """按日期对账活动状态（confirmed -> upcoming / ongoing / completed）

        整个对账只写入一次。

        Args:
            today: 对账基准日期，默认本地今天

        Returns:
            状态发生变化的活动
        """
        today = today or date.today()
        now = utc_now()
        changed: list[Event] = []
        for event in list(self._events.values()):
            target = reconcile_status(event, today)
            if target is None:
                continue
            updated = event.model_copy(update={"status": target, "updated_at": now})
            self._events[event.id] = updated
            changed.append(updated)
            log.info(
                "event_status_reconciled",
                event_id=event.id,
                from_status=event.status.value,
                to_status=target.value,
            )

        if changed:
            await self._persist()
        await log.ainfo(
            "event_statuses_reconciled",
            today=today.isoformat(),
            changed_count=len(changed),
        )
        return changed

    # ============================================================
    # 子项集合：预算 / 日程 / 场地 / 供应商 / 人员 / 嘉宾 / 风险 / 清单
    # ============================================================

    async def add_budget_item(self, event_id: str, item: BudgetItem | Mapping[str, Any]) -> Event:
        """添加预算明细，重算 budget.spent"""
        return await self._add_item(event_id, "budget_items", item)

    async def update_budget_item(
        self, event_id: str, item_id: str, fields: Mapping[str, Any]
    ) -> Event:
        return await self._update_item(event_id, "budget_items", item_id, fields)

    async def delete_budget_item(self, event_id: str, item_id: str) -> Event:
        return await self._delete_item(event_id, "budget_items", item_id)

    async def add_timeline_item(
        self, event_id: str, item: TimelineItem | Mapping[str, Any]
    ) -> Event:
        """添加日程条目，集合按时间重新排序"""
        return await self._add_item(event_id, "timeline_items", item)

    async def update_timeline_item(
        self, event_id: str, item_id: str, fields: Mapping[str, Any]
    ) -> Event:
        return await self._update_item(event_id, "timeline_items", item_id, fields)

    async def delete_timeline_item(self, event_id: str, item_id: str) -> Event:
        return await self._delete_item(event_id, "timeline_items", item_id)

    async def add_venue(self, event_id: str, venue: Venue | Mapping[str, Any]) -> Event:
        return await self._add_item(event_id, "venues", venue)

    async def update_venue(self, event_id: str, venue_id: str, fields: Mapping[str, Any]) -> Event:
        return await self._update_item(event_id, "venues", venue_id, fields)

    async def delete_venue(self, event_id: str, venue_id: str) -> Event:
        return await self._delete_item(event_id, "venues", venue_id)

    async def add_vendor(self, event_id: str, vendor: Vendor | Mapping[str, Any]) -> Event:
        return await self._add_item(event_id, "vendors", vendor)

    async def update_vendor(
        self, event_id: str, vendor_id: str, fields: Mapping[str, Any]
    ) -> Event:
        return await self._update_item(event_id, "vendors", vendor_id, fields)

    async def delete_vendor(self, event_id: str, vendor_id: str) -> Event:
        return await self._delete_item(event_id, "vendors", vendor_id)

    async def add_staff(self, event_id: str, staff: Staff | Mapping[str, Any]) -> Event:
        return await self._add_item(event_id, "staff", staff)

    async def update_staff(self, event_id: str, staff_id: str, fields: Mapping[str, Any]) -> Event:
        return await self._update_item(event_id, "staff", staff_id, fields)

    async def delete_staff(self, event_id: str, staff_id: str) -> Event:
        return await self._delete_item(event_id, "staff", staff_id)

    async def add_guest(self, event_id: str, guest: Guest | Mapping[str, Any]) -> Event:
        """添加嘉宾，重算 guest_count.confirmed"""
        return await self._add_item(event_id, "guests", guest)

    async def update_guest(self, event_id: str, guest_id: str, fields: Mapping[str, Any]) -> Event:
        return await self._update_item(event_id, "guests", guest_id, fields)

    async def delete_guest(self, event_id: str, guest_id: str) -> Event:
        return await self._delete_item(event_id, "guests", guest_id)

    async def add_risk(self, event_id: str, risk: Risk | Mapping[str, Any]) -> Event:
        return await self._add_item(event_id, "risks", risk)

    async def update_risk(self, event_id: str, risk_id: str, fields: Mapping[str, Any]) -> Event:
        return await self._update_item(event_id, "risks", risk_id, fields)

    async def delete_risk(self, event_id: str, risk_id: str) -> Event:
        return await self._delete_item(event_id, "risks", risk_id)

    async def add_checklist_item(
        self, event_id: str, item: ChecklistItem | Mapping[str, Any]
    ) -> Event:
        return await self._add_item(event_id, "day_of_checklist", item)

    async def update_checklist_item(
        self, event_id: str, item_id: str, fields: Mapping[str, Any]
    ) -> Event:
        return await self._update_item(event_id, "day_of_checklist", item_id, fields)

    async def delete_checklist_item(self, event_id: str, item_id: str) -> Event:
        return await self._delete_item(event_id, "day_of_checklist", item_id)

    # ============================================================
    # 报名 / 签到 / 证书
    # ============================================================

    async def register_guest(
        self,
        event_id: str,
        name: str,
        email: str,
        department: str = "",
        year: str = "",
    ) -> Guest:
        """学生自助报名：生成报名编号并以 registered 状态加入

        Returns:
            新建的 Guest（含 registration_id，用于生成签到二维码）
        """
        event = self._require_event(event_id)
        guest = _coerce(
            Guest,
            {
                "name": name,
                "email": email,
                "department": department or None,
                "year": year or None,
                "registration_id": self._new_registration_id(event),
                "status": GuestStatus.REGISTERED,
            },
        )
        await self._add_item(event_id, "guests", guest)
        log.info(
            "guest_registered",
            event_id=event_id,
            guest_id=guest.id,
            registration_id=guest.registration_id,
        )
        return guest

    async def check_in_guest(self, event_id: str, registration_id: str) -> Guest:
        """按报名编号签到：状态置为 attended 并记录签到时间

        重复签到不报错，返回原记录。

        Raises:
            NotFoundError: 活动或报名编号不存在
            ValidationError: 报名已取消，或编号为空
        """
        event = self._require_event(event_id)
        if not registration_id.strip():
            raise ValidationError("Registration id is required", field="registration_id")

        wanted = registration_id.strip().upper()
        guest = next((g for g in event.guests if g.registration_id.upper() == wanted), None)
        if guest is None:
            raise NotFoundError("guest", registration_id, event_id)
        if guest.status == GuestStatus.CANCELLED:
            raise ValidationError("Cancelled registration cannot check in", field="status")
        if guest.status == GuestStatus.ATTENDED:
            log.info("guest_already_checked_in", event_id=event_id, guest_id=guest.id)
            return guest

        updated = await self._update_item(
            event_id,
            "guests",
            guest.id,
            {"status": GuestStatus.ATTENDED, "checked_in_at": utc_now()},
        )
        log.info("guest_checked_in", event_id=event_id, guest_id=guest.id)
        return next(g for g in updated.guests if g.id == guest.id)

    def certificate_recipients(self, event_id: str, search: str = "") -> list[Guest]:
        """可颁发参与证书的嘉宾（已到场），按姓名或报名编号模糊过滤"""
        event = self._require_event(event_id)
        term = search.strip().lower()
        return [
            guest
            for guest in event.guests
            if guest.status == GuestStatus.ATTENDED
            and (not term or term in guest.name.lower() or term in guest.registration_id.lower())
        ]

    # ============================================================
    # 内部实现
    # ============================================================

    def _require_event(self, event_id: str) -> Event:
        event = self._events.get(event_id)
        if event is None:
            raise NotFoundError("event", event_id)
        return event

    @staticmethod
    def _check_status_change(current: Event, value: Any) -> None:
        try:
            target = EventStatus(value)
        except ValueError as e:
            raise ValidationError(f"Unknown status: {value}", field="status") from e
        if target != current.status and not validate_transition(current.status, target):
            raise InvalidTransitionError(current.status, target)

    async def _transition(self, event_id: str, target: EventStatus, **changes: Any) -> Event:
        event = self._require_event(event_id)
        if not validate_transition(event.status, target):
            raise InvalidTransitionError(event.status, target)

        updated = event.model_copy(
            update={"status": target, "updated_at": utc_now(), **changes}
        )
        self._events[event_id] = updated
        log.info(
            "event_status_changed",
            event_id=event_id,
            from_status=event.status.value,
            to_status=target.value,
        )
        await self._persist()
        return updated

    async def _add_item(
        self, event_id: str, collection: str, item: CamelModel | Mapping[str, Any]
    ) -> Event:
        event = self._require_event(event_id)
        new_item = _coerce(NESTED_COLLECTIONS[collection], item)
        items = getattr(event, collection)
        if any(existing.id == new_item.id for existing in items):
            raise DuplicateIdError(_ITEM_KINDS[collection], new_item.id)
        if collection == "guests":
            _check_registration_id(items, new_item)
        return await self._commit_collection(event, collection, [*items, new_item])

    async def _update_item(
        self, event_id: str, collection: str, item_id: str, fields: Mapping[str, Any]
    ) -> Event:
        event = self._require_event(event_id)
        model = NESTED_COLLECTIONS[collection]
        items = list(getattr(event, collection))
        index = next((i for i, existing in enumerate(items) if existing.id == item_id), None)
        if index is None:
            raise NotFoundError(_ITEM_KINDS[collection], item_id, event_id)

        items[index] = _merge(model, items[index], _normalize_fields(model, fields))
        if collection == "guests":
            _check_registration_id(items, items[index])
        return await self._commit_collection(event, collection, items)

    async def _delete_item(self, event_id: str, collection: str, item_id: str) -> Event:
        event = self._require_event(event_id)
        items = getattr(event, collection)
        remaining = [existing for existing in items if existing.id != item_id]
        if len(remaining) == len(items):
            log.debug(
                "item_delete_noop",
                event_id=event_id,
                kind=_ITEM_KINDS[collection],
                item_id=item_id,
            )
            return event
        return await self._commit_collection(event, collection, remaining)

    async def _commit_collection(self, event: Event, collection: str, items: list) -> Event:
        """替换子项集合 -> 重算派生字段 -> 刷新 updated_at -> 写入"""
        updated = event.model_copy(update={collection: items, "updated_at": utc_now()})
        updated = recompute_derived(updated, collection)
        self._events[event.id] = updated
        log.debug(
            "event_collection_changed",
            event_id=event.id,
            kind=_ITEM_KINDS[collection],
            item_count=len(items),
        )
        await self._persist()
        return updated

    def _new_registration_id(self, event: Event) -> str:
        """生成活动内唯一的报名编号：<前缀>-<四位数字>-<院系缩写>"""
        code = "".join(ch for ch in event.department if ch.isalnum())[:3].upper() or "GEN"
        taken = {guest.registration_id.upper() for guest in event.guests}
        for _ in range(REGISTRATION_ID_MAX_ATTEMPTS):
            candidate = f"{REGISTRATION_ID_PREFIX}-{self._rng.randint(1000, 9999)}-{code}"
            if candidate not in taken:
                return candidate
        raise EventDeskError(
            f"Could not allocate a unique registration id for event {event.id}",
            recoverable=True,
        )

    async def _persist(self) -> bool:
        """整体写入当前集合；失败时记录并标记 pending，不向调用方抛出"""
        async with self._persist_lock:
            if not self._synced and not await self._sync_with_stored():
                return False

            snapshot = list(self._events.values())
            try:
                await self._gateway.write_all(snapshot)
            except PersistError as e:
                self._pending_write = True
                self.last_error = e
                log.warning(
                    "events_persist_failed",
                    collection_key=self._gateway.collection_key,
                    event_count=len(snapshot),
                    error=str(e),
                )
                return False

        if self._pending_write:
            log.info("events_persist_recovered", collection_key=self._gateway.collection_key)
        self._pending_write = False
        self.last_error = None
        return True

    async def _sync_with_stored(self) -> bool:
        """重新读取持久化集合并并入内存（调用方须持有写锁）

        持久化中的活动保持原顺序，内存中的同 id 活动覆盖之，新活动追加在后。
        读取失败时拒绝写入：标记 pending 并记录 PersistError。

        Returns:
            True 如果已合并，可以安全地整体覆盖写入
        """
        try:
            stored = await self._gateway.read_all()
        except LoadError as e:
            self._pending_write = True
            self.last_error = PersistError(
                f"集合 {self._gateway.collection_key} 尚未成功加载，暂不覆盖写入", e
            )
            log.warning(
                "events_persist_deferred",
                collection_key=self._gateway.collection_key,
                event_count=len(self._events),
                error=str(e),
            )
            return False

        merged = {event.id: recompute_all(event) for event in stored}
        merged.update(self._events)
        self._events = merged
        self._synced = True
        log.info(
            "events_merged_with_stored",
            collection_key=self._gateway.collection_key,
            stored_count=len(stored),
            event_count=len(merged),
        )
        return True
