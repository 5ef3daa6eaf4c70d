"""派生字段与汇总单元测试"""

from eventdesk.core.derived import (
    DERIVED_BY_COLLECTION,
    budget_summary,
    checklist_progress,
    compute_budget_spent,
    compute_confirmed_guests,
    guest_stats,
    open_risks_by_exposure,
    recompute_all,
    recompute_derived,
    risk_score,
    sort_timeline,
)
from eventdesk.core.models import (
    BudgetItem,
    BudgetSummary,
    ChecklistItem,
    Guest,
    GuestStatus,
    Risk,
    RiskLevel,
    RiskStatus,
    TimelineItem,
    Venue,
)


class TestFolds:
    def test_budget_spent_sums_actual_cost_regardless_of_paid_flag(self):
        items = [
            BudgetItem(category="Food", actual_cost=200, is_paid=True),
            BudgetItem(category="Decor", actual_cost=150, is_paid=False),
        ]
        assert compute_budget_spent(items) == 350

    def test_budget_spent_empty(self):
        assert compute_budget_spent([]) == 0

    def test_confirmed_counts_registered_and_attended(self):
        guests = [
            Guest(name="a", status=GuestStatus.INVITED),
            Guest(name="b", status=GuestStatus.REGISTERED),
            Guest(name="c", status=GuestStatus.ATTENDED),
            Guest(name="d", status=GuestStatus.CANCELLED),
        ]
        assert compute_confirmed_guests(guests) == 2

    def test_sort_timeline_is_stable(self):
        first = TimelineItem(time="10:00", title="first")
        second = TimelineItem(time="10:00", title="second")
        early = TimelineItem(time="08:15", title="early")
        ordered = sort_timeline([first, second, early])
        assert [item.title for item in ordered] == ["early", "first", "second"]


class TestRecompute:
    def test_registry_covers_derived_collections(self):
        assert set(DERIVED_BY_COLLECTION) == {"budget_items", "guests", "timeline_items"}

    def test_recompute_all_fixes_stale_values(self, make_event):
        event = make_event(
            budget=BudgetSummary(total=1000, spent=999),
            budget_items=[BudgetItem(category="Food", actual_cost=120)],
            guests=[Guest(name="a", status=GuestStatus.REGISTERED)],
            timeline_items=[
                TimelineItem(time="17:00", title="Closing"),
                TimelineItem(time="09:00", title="Opening"),
            ],
        )
        fixed = recompute_all(event)
        assert fixed.budget.spent == 120
        assert fixed.budget.total == 1000
        assert fixed.guest_count.confirmed == 1
        assert [item.time for item in fixed.timeline_items] == ["09:00", "17:00"]
        # 原对象不变
        assert event.budget.spent == 999

    def test_recompute_without_derived_fields_returns_same_event(self, make_event):
        event = make_event(venues=[Venue(name="Seminar Hall 2")])
        assert recompute_derived(event, "venues") is event


class TestSummaries:
    def test_budget_summary(self, make_event):
        event = recompute_all(
            make_event(
                budget=BudgetSummary(total=1000),
                budget_items=[
                    BudgetItem(category="Food", actual_cost=200, paid=200, is_paid=True),
                    BudgetItem(category="Decor", actual_cost=150, paid=50),
                ],
            )
        )
        report = budget_summary(event)
        assert report.spent == 350
        assert report.paid == 250
        assert report.remaining == 650
        assert report.utilization_percent == 35.0
        assert report.over_budget is False

    def test_budget_summary_over_budget_and_zero_total(self, make_event):
        event = recompute_all(
            make_event(budget_items=[BudgetItem(category="Sound", actual_cost=80)])
        )
        report = budget_summary(event)
        assert report.remaining == -80
        assert report.over_budget is True
        assert report.utilization_percent == 0.0

    def test_guest_stats(self, make_event):
        event = recompute_all(
            make_event(
                guests=[
                    Guest(name="a", status=GuestStatus.INVITED),
                    Guest(name="b", status=GuestStatus.REGISTERED),
                    Guest(name="c", status=GuestStatus.REGISTERED),
                    Guest(name="d", status=GuestStatus.ATTENDED),
                    Guest(name="e", status=GuestStatus.CANCELLED),
                ]
            )
        )
        stats = guest_stats(event)
        assert stats.total == 5
        assert stats.confirmed == 3
        assert stats.invited == 1
        assert stats.attended == 1
        assert stats.cancelled == 1
        assert stats.attendance_percent == 33.3

    def test_checklist_progress(self):
        items = [
            ChecklistItem(task="Test mics", is_completed=True),
            ChecklistItem(task="Print badges"),
            ChecklistItem(task="Open gates", is_completed=True),
            ChecklistItem(task="Brief volunteers"),
        ]
        progress = checklist_progress(items)
        assert (progress.completed, progress.total, progress.percent) == (2, 4, 50.0)
        assert checklist_progress([]).percent == 0.0

    def test_risk_exposure(self):
        high = Risk(title="Rain", probability=RiskLevel.HIGH, impact=RiskLevel.MEDIUM)
        low = Risk(title="Late caterer")
        closed = Risk(
            title="Power cut",
            probability=RiskLevel.HIGH,
            impact=RiskLevel.HIGH,
            status=RiskStatus.MITIGATED,
        )
        assert risk_score(high) == 6
        assert risk_score(closed) == 9
        assert open_risks_by_exposure([low, closed, high]) == [high, low]
