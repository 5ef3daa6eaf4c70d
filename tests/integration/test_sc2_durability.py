"""SC-2 持久性集成测试

进程重启后活动及其子项完整。
"""

from eventdesk.core.models import ChecklistItem, EventStatus, Risk, RiskLevel, Venue


class TestSC2Durability:
    """SC-2: 进程重启后数据完整"""

    async def test_events_survive_restart(self, open_store, make_event):
        """创建活动 -> 重新打开 -> 数据完整"""
        store1 = await open_store()
        event = await store1.create(make_event())
        await store1.add_venue(event.id, Venue(name="Main Auditorium", capacity=800))
        await store1.add_risk(
            event.id, Risk(title="Rain", probability=RiskLevel.HIGH, impact=RiskLevel.MEDIUM)
        )
        await store1.add_checklist_item(event.id, ChecklistItem(task="Test microphones"))
        await store1.approve(event.id)
        expected = store1.list_events()

        store2 = await open_store()
        assert store2.list_events() == expected
        restored = store2.get(event.id)
        assert restored.status == EventStatus.CONFIRMED
        assert restored.is_approved is True
        assert restored.venues[0].capacity == 800

    async def test_changes_after_restart_are_kept(self, open_store, make_event):
        store1 = await open_store()
        event = await store1.create(make_event())

        store2 = await open_store()
        await store2.update(event.id, {"location": "Open Air Theatre"})

        store3 = await open_store()
        assert store3.get(event.id).location == "Open Air Theatre"
