import datetime as dt

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inspectrack.models import Base
from inspectrack.db import crud


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


async def test_create_and_get_property_with_units(db):
    prop = await crud.create_property(db, "Maple Court", "12 Maple St")
    await crud.create_unit(db, prop.id, "Unit B")
    await crud.create_unit(db, prop.id, "Unit A")

    fetched = await crud.get_property(db, prop.id)
    assert fetched.name == "Maple Court"
    units = await crud.list_units_for_property(db, prop.id)
    assert [u.name for u in units] == ["Unit A", "Unit B"]


async def test_profile_email_is_case_insensitive(db):
    await crud.create_profile(db, "Jane@Example.com", "hash", "Jane")
    found = await crud.get_profile_by_email(db, "JANE@example.COM")
    assert found is not None
    assert found.email == "jane@example.com"


async def test_list_inspections_filters_and_hides_archived(db):
    prop = await crud.create_property(db, "P")
    unit = await crud.create_unit(db, prop.id, "1")
    a = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 3, 2), "09:00", unit_id=unit.id)
    b = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 3, 1), "10:00")
    await crud.update_inspection(db, b, archived=True)

    visible = await crud.list_inspections(db, property_id=prop.id)
    assert [i.id for i in visible] == [a.id]

    everything = await crud.list_inspections(db, property_id=prop.id, include_archived=True)
    assert [i.id for i in everything] == [b.id, a.id]

    assert await crud.list_inspections(db, unit_id=unit.id, completed=True) == []


async def test_list_inspections_in_range(db):
    prop = await crud.create_property(db, "P")
    inside = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 5, 10), "08:00")
    await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 6, 1), "08:00")

    rows = await crud.list_inspections_in_range(db, dt.date(2026, 5, 1), dt.date(2026, 5, 31))
    assert [i.id for i in rows] == [inside.id]


async def test_subtask_original_inspection_defaults_to_owner(db):
    prop = await crud.create_property(db, "P")
    insp = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 1, 5), "09:00")
    sub = await crud.create_subtask(db, insp.id, "Check smoke detector", room_name="Kitchen")
    assert sub.original_inspection_id == insp.id
    assert sub.completed is False


async def test_delete_subtask_removes_activity(db):
    prop = await crud.create_property(db, "P")
    insp = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 1, 5), "09:00")
    sub = await crud.create_subtask(db, insp.id, "Replace bulb")
    await crud.create_subtask_activity(db, sub.id, "note_added", notes="burnt out")

    await crud.delete_subtask(db, sub)
    assert await crud.get_subtask(db, sub.id) is None
    assert await crud.list_subtask_activity(db, sub.id) == []


async def test_template_rooms_and_items_get_next_order_index(db):
    tpl = await crud.create_template(db, "Annual", "S8 - 1st Annual")
    r1 = await crud.create_template_room(db, tpl.id, "Kitchen")
    r2 = await crud.create_template_room(db, tpl.id, "Bath")
    assert (r1.order_index, r2.order_index) == (0, 1)

    i1 = await crud.create_template_item(db, r1.id, "Stove works")
    i2 = await crud.create_template_item(db, r1.id, "Sink drains")
    assert (i1.order_index, i2.order_index) == (0, 1)

    loaded = await crud.get_template(db, tpl.id)
    assert [r.name for r in loaded.rooms] == ["Kitchen", "Bath"]
    assert [i.description for i in loaded.rooms[0].items] == ["Stove works", "Sink drains"]


async def test_link_template_property_is_idempotent(db):
    prop = await crud.create_property(db, "P")
    tpl = await crud.create_template(db, "T")
    first = await crud.link_template_property(db, tpl.id, prop.id)
    second = await crud.link_template_property(db, tpl.id, prop.id)
    assert first.id == second.id
    assert await crud.list_template_property_ids(db, tpl.id) == [prop.id]


async def test_inventory_types_sorted_by_name(db):
    await crud.create_inventory_type(db, "Smoke Detector")
    await crud.create_inventory_type(db, "Blinds")
    names = [t.name for t in await crud.list_inventory_types(db)]
    assert names == ["Blinds", "Smoke Detector"]
    assert (await crud.get_inventory_type_by_name(db, "Blinds")) is not None


async def test_delete_inventory_type_clears_references(db):
    smoke = await crud.create_inventory_type(db, "Smoke detector")
    keep = await crud.create_inventory_type(db, "Blinds")
    prop = await crud.create_property(db, "P")
    insp = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 3, 1), "09:00")
    sub = await crud.create_subtask(db, insp.id, "Hall smoke", inventory_type_id=smoke.id, inventory_quantity=2)
    other = await crud.create_subtask(db, insp.id, "Blinds", inventory_type_id=keep.id)
    tpl = await crud.create_template(db, "T")
    room = await crud.create_template_room(db, tpl.id, "Hall")
    item = await crud.create_template_item(db, room.id, "Smoke", inventory_type_id=smoke.id)
    lib = await crud.create_room_template(db, "Hall")
    lib_item = await crud.create_room_template_item(db, lib.id, "Smoke", inventory_type_id=smoke.id)

    await crud.delete_inventory_type(db, smoke)

    assert await crud.get_inventory_type(db, smoke.id) is None
    assert (await crud.get_subtask(db, sub.id)).inventory_type_id is None
    assert (await crud.get_subtask(db, sub.id)).inventory_quantity == 2
    assert (await crud.get_subtask(db, other.id)).inventory_type_id == keep.id
    assert (await crud.get_template_item(db, item.id)).inventory_type_id is None
    assert (await crud.get_room_template_item(db, lib_item.id)).inventory_type_id is None


async def test_delete_vendor_type_clears_references(db):
    plumbing = await crud.create_vendor_type(db, "Plumbing")
    prop = await crud.create_property(db, "P")
    insp = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 3, 1), "09:00")
    sub = await crud.create_subtask(db, insp.id, "Sink", vendor_type_id=plumbing.id)

    await crud.delete_vendor_type(db, plumbing)

    assert await crud.list_vendor_types(db) == []
    assert (await crud.get_subtask(db, sub.id)).vendor_type_id is None


async def test_delete_floorplan_clears_units(db):
    fp = await crud.create_floorplan(db, "2BR")
    prop = await crud.create_property(db, "P")
    unit = await crud.create_unit(db, prop.id, "1", floorplan_id=fp.id)

    await crud.delete_floorplan(db, fp)

    assert (await crud.get_unit(db, unit.id)).floorplan_id is None
    assert await crud.get_floorplan_by_name(db, "2BR") is None


async def test_room_library_items_ordered_and_delete_keeps_copies(db):
    lib = await crud.create_room_template(db, "Kitchen")
    await crud.create_room_template_item(db, lib.id, "Sink")
    await crud.create_room_template_item(db, lib.id, "Stove")
    fetched = await crud.get_room_template(db, lib.id)
    assert [(i.description, i.order_index) for i in fetched.items] == [("Sink", 0), ("Stove", 1)]

    tpl = await crud.create_template(db, "T")
    room = await crud.create_template_room(db, tpl.id, "Kitchen", room_template_id=lib.id)
    await crud.delete_room_template(db, fetched)

    assert await crud.list_room_templates(db) == []
    kept = await crud.get_template_room(db, room.id)
    assert kept.name == "Kitchen"
    assert kept.room_template_id is None
