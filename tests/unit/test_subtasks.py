import datetime as dt

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inspectrack.db import crud
from inspectrack.models import Base, Subtask
from inspectrack.services import subtasks
from inspectrack.services.subtasks import FollowUpDateError, SubtaskValidationError, normalize_edit, parse_quantity


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


def test_normalize_edit_rules():
    fields = normalize_edit("  Fix blinds ", [], 0, "none")
    assert fields == {
        "description": "Fix blinds",
        "assigned_users": None,
        "inventory_quantity": None,
        "inventory_type_id": None,
        "vendor_type_id": None,
    }
    assert normalize_edit("x", ["u1"], 2, "t1")["inventory_quantity"] == 2
    assert normalize_edit("x", None, None, None, "v1")["vendor_type_id"] == "v1"


def test_normalize_edit_rejects_blank_description():
    with pytest.raises(SubtaskValidationError):
        normalize_edit("   ", None, None, None)


def test_parse_quantity():
    assert parse_quantity(" 4 ") == 4
    for bad in ("0", "-2", "two", None, "1.5"):
        with pytest.raises(SubtaskValidationError):
            parse_quantity(bad)


async def _inspection(db, parent_id=None, day=5):
    prop_id = (await crud.create_property(db, "P")).id if parent_id is None else (
        await crud.get_inspection(db, parent_id)).property_id
    return await crud.create_inspection(
        db, prop_id, "HUD", dt.date(2026, 1, day), "09:00", parent_inspection_id=parent_id,
    )


async def test_edit_syncs_linked_copies(db):
    first = await _inspection(db)
    follow = await _inspection(db, parent_id=first.id, day=20)
    original = await crud.create_subtask(db, first.id, "Smoke detector", inventory_quantity=1)
    copy = await crud.create_subtask(db, follow.id, "Smoke detector", original_inspection_id=first.id)
    unrelated = await crud.create_subtask(db, follow.id, "Blinds", original_inspection_id=first.id)

    await subtasks.edit_subtask(db, copy, description="Smoke detector (hall)", inventory_quantity=2)

    refreshed = await crud.get_subtask(db, original.id)
    assert refreshed.description == "Smoke detector (hall)"
    assert refreshed.inventory_quantity == 2
    assert (await crud.get_subtask(db, unrelated.id)).description == "Blinds"


async def test_mark_failed_records_activity(db):
    insp = await _inspection(db)
    sub = await crud.create_subtask(db, insp.id, "GFCI outlet", status="pending")

    await subtasks.mark_failed(db, sub, "Trips immediately", "tech1", "inspector1")

    assert sub.status == "fail"
    assert sub.assigned_users == ["tech1"]
    assert sub.status_changed_by == "inspector1"
    activity = await crud.list_subtask_activity(db, sub.id)
    assert [a.activity_type for a in activity] == ["status_changed", "note_added"]
    assert activity[0].old_value == "pending"
    assert activity[1].notes == "Trips immediately"


async def test_mark_failed_requires_notes_and_assignee(db):
    insp = await _inspection(db)
    sub = await crud.create_subtask(db, insp.id, "x")
    with pytest.raises(SubtaskValidationError):
        await subtasks.mark_failed(db, sub, "  ", "tech1", "me")
    with pytest.raises(SubtaskValidationError):
        await subtasks.mark_failed(db, sub, "notes", "", "me")


async def test_toggle_complete(db):
    insp = await _inspection(db)
    sub = await crud.create_subtask(db, insp.id, "x")
    await subtasks.toggle_subtask_complete(db, sub, "me")
    assert sub.completed is True and sub.completed_by == "me"
    await subtasks.toggle_subtask_complete(db, sub, "me")
    assert sub.completed is False and sub.completed_at is None


async def test_follow_up_copies_chain_once(db):
    first = await _inspection(db)
    second = await _inspection(db, parent_id=first.id, day=10)
    await crud.create_subtask(db, first.id, "Smoke detector", status="fail", completed=True, inventory_quantity=2)
    await crud.create_subtask(db, second.id, "Smoke detector", original_inspection_id=first.id, status="pass")
    await crud.create_subtask(db, second.id, "Window screen", status="fail")

    child, copied = await subtasks.create_follow_up(db, second, "S8 - Reinspection", dt.date(2026, 1, 30), "11:00")

    assert copied == 2
    assert child.parent_inspection_id == second.id
    assert child.property_id == second.property_id
    subs = await crud.list_subtasks_for_inspection(db, child.id)
    assert sorted(s.description for s in subs) == ["Smoke detector", "Window screen"]
    assert all(s.status == "pending" and s.completed is False for s in subs)
    smoke = next(s for s in subs if s.description == "Smoke detector")
    assert smoke.original_inspection_id == first.id
    # first inspection's copy is the one carried forward
    assert smoke.inventory_quantity == 2


async def test_mark_failed_is_all_or_nothing(db, monkeypatch):
    insp = await _inspection(db)
    sub = await crud.create_subtask(db, insp.id, "Water heater", status="pending")
    sub_id = sub.id
    real = subtasks.SubtaskActivity

    def activity(**kwargs):
        # the note row violates NOT NULL, so the second insert fails
        if kwargs["activity_type"] == "note_added":
            kwargs["activity_type"] = None
        return real(**kwargs)

    monkeypatch.setattr(subtasks, "SubtaskActivity", activity)
    with pytest.raises(IntegrityError):
        await subtasks.mark_failed(db, sub, "Leaking", "tech1", "inspector1")

    stored = await db.get(Subtask, sub_id, populate_existing=True)
    assert stored.status == "pending"
    assert stored.assigned_users is None
    assert await crud.list_subtask_activity(db, sub_id) == []


async def test_follow_up_cannot_predate_parent(db):
    parent = await crud.create_inspection(
        db, (await crud.create_property(db, "P")).id, "HUD", dt.date(2026, 7, 1), "09:00",
    )
    with pytest.raises(FollowUpDateError):
        await subtasks.create_follow_up(db, parent, "S8 - Reinspection", dt.date(2026, 1, 1), "09:00")
    assert await crud.list_inspections(db) == [parent]

    child, _ = await subtasks.create_follow_up(db, parent, "S8 - Reinspection", dt.date(2026, 7, 1), "13:00")
    assert child.date == parent.date


async def test_follow_up_takes_oldest_copy_of_each_item(db):
    root = await _inspection(db)
    middle = await _inspection(db, parent_id=root.id, day=10)
    await crud.create_subtask(db, root.id, "Handrail", assigned_users=["root-user"], vendor_type_id="v-carpentry")
    await crud.create_subtask(
        db, middle.id, "Handrail", original_inspection_id=root.id, assigned_users=["new-user"],
    )

    child, copied = await subtasks.create_follow_up(db, middle, "S8 - Reinspection", dt.date(2026, 1, 20), "09:00")

    assert copied == 1
    (handrail,) = await crud.list_subtasks_for_inspection(db, child.id)
    assert handrail.assigned_users == ["root-user"]
    assert handrail.vendor_type_id == "v-carpentry"


async def test_default_assignees_from_vendor_type(db):
    tech = await crud.create_profile(db, "plumber@example.com", "x", "Pat")
    vt = await crud.create_vendor_type(db, "Plumbing", default_assigned_user_id=tech.id)
    bare = await crud.create_vendor_type(db, "Painting")

    assert await subtasks.default_assignees(db, vt.id, None) == [tech.id]
    assert await subtasks.default_assignees(db, vt.id, ["someone"]) == ["someone"]
    assert await subtasks.default_assignees(db, bare.id, None) is None
    assert await subtasks.default_assignees(db, None, None) is None
