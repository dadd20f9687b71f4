from datetime import date

from inspectrack.models import Inspection, InventoryType, Subtask
from inspectrack.services.analytics import compute_stats

TODAY = date(2026, 3, 18)  # a Wednesday


def _insp(day, type="HUD", completed=False):
    return Inspection(property_id="p", type=type, date=day, time="09:00", completed=completed)


def _sub(status=None, completed=False, type_id=None, qty=None):
    return Subtask(inspection_id="i", original_inspection_id="i", description="x",
                   status=status, completed=completed, inventory_type_id=type_id, inventory_quantity=qty)


def test_empty_data_gives_zeros():
    stats = compute_stats([], [], [], today=TODAY)
    assert stats.total_inspections == 0
    assert stats.pass_rate == 0.0
    assert stats.top_failed_items == []
    assert stats.monthly_trend == []


def test_pass_and_fail_rates():
    subs = [_sub("pass"), _sub(completed=True), _sub("fail"), _sub("pending")]
    stats = compute_stats([], subs, [], today=TODAY)
    assert stats.pass_rate == 50.0
    assert stats.fail_rate == 25.0
    assert stats.completed_tasks == 2
    assert stats.pending_tasks == 2


def test_top_failed_items_sum_quantities():
    types = [InventoryType(id="t1", name="Smoke Detector"), InventoryType(id="t2", name="Blinds")]
    subs = [
        _sub("fail", type_id="t1", qty=3),
        _sub("fail", type_id="t2"),
        _sub("fail", type_id="t2", qty=1),
        _sub("fail", type_id="gone", qty=1),
        _sub("pass", type_id="t1", qty=10),
    ]
    stats = compute_stats([], subs, types, today=TODAY)
    assert stats.top_failed_items[0] == {"name": "Smoke Detector", "count": 3}
    assert {"name": "Blinds", "count": 2} in stats.top_failed_items
    assert {"name": "Unknown", "count": 1} in stats.top_failed_items


def test_upcoming_grouped_by_week_start():
    inspections = [
        _insp(date(2026, 3, 19)),
        _insp(date(2026, 3, 21)),
        _insp(date(2026, 3, 23)),
        _insp(date(2026, 3, 20), completed=True),
        _insp(date(2026, 5, 1)),
    ]
    stats = compute_stats(inspections, [], [], today=TODAY)
    assert stats.upcoming_inspections == [
        {"date": "Mar 15", "week_start": "2026-03-15", "count": 2},
        {"date": "Mar 22", "week_start": "2026-03-22", "count": 1},
    ]


def test_by_type_and_monthly_trend():
    inspections = [
        _insp(date(2026, 1, 10), type="HUD", completed=True),
        _insp(date(2026, 1, 12), type="Rental License"),
        _insp(date(2026, 3, 1), type="HUD", completed=True),
        _insp(date(2025, 6, 1), type="HUD", completed=True),
    ]
    stats = compute_stats(inspections, [], [], today=TODAY)
    assert {"type": "HUD", "count": 3} in stats.inspections_by_type
    assert stats.monthly_trend == [
        {"month": "Jan 2026", "completed": 1, "pending": 1},
        {"month": "Mar 2026", "completed": 1, "pending": 0},
    ]
