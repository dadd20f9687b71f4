import datetime as dt

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inspectrack.db import crud
from inspectrack.models import Base
from inspectrack.services.templates import TemplateNotFound, TemplateTypeMismatch, apply_template


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


async def _template(db, rooms: int, items: int):
    tpl = await crud.create_template(db, "Annual", "S8 - 1st Annual")
    room_ids = []
    for r in range(rooms):
        room = await crud.create_template_room(db, tpl.id, f"Room {r}")
        room_ids.append(room.id)
        for k in range(items):
            await crud.create_template_item(db, room.id, f"Item {r}.{k}")
    return tpl, room_ids


async def _inspection(db):
    prop = await crud.create_property(db, "P")
    return await crud.create_inspection(db, prop.id, "S8 - 1st Annual", dt.date(2026, 7, 1), "09:00")


async def test_apply_creates_one_subtask_per_item(db):
    tpl, _ = await _template(db, rooms=3, items=4)
    insp = await _inspection(db)

    result = await apply_template(db, tpl.id, insp.id, created_by="u1")

    assert result.partial is False
    assert result.rooms_applied == 3
    assert result.subtasks_created == 12
    subs = await crud.list_subtasks_for_inspection(db, insp.id)
    assert len(subs) == 12
    assert {s.room_name for s in subs} == {"Room 0", "Room 1", "Room 2"}
    assert all(s.status == "pending" and s.original_inspection_id == insp.id for s in subs)

    refreshed = await crud.get_inspection(db, insp.id)
    assert refreshed.inspection_template_id == tpl.id


async def test_room_failure_is_reported_and_others_land(db, monkeypatch):
    tpl, room_ids = await _template(db, rooms=3, items=2)
    insp = await _inspection(db)
    insp_id = insp.id
    real = crud.list_template_items

    async def flaky(db, room_id):
        if room_id == room_ids[1]:
            raise OperationalError("SELECT ...", {}, Exception("database is locked"))
        return await real(db, room_id)

    monkeypatch.setattr(crud, "list_template_items", flaky)

    result = await apply_template(db, tpl.id, insp_id)

    assert result.partial is True
    assert result.failed_rooms == ["Room 1"]
    assert result.rooms_applied == 2
    assert result.subtasks_created == 4
    subs = await crud.list_subtasks_for_inspection(db, insp_id)
    assert sorted(s.room_name for s in subs) == ["Room 0", "Room 0", "Room 2", "Room 2"]


async def test_empty_rooms_count_as_applied(db):
    tpl, _ = await _template(db, rooms=2, items=0)
    insp = await _inspection(db)
    result = await apply_template(db, tpl.id, insp.id)
    assert result.rooms_applied == 2
    assert result.subtasks_created == 0


async def test_unknown_template(db):
    insp = await _inspection(db)
    with pytest.raises(TemplateNotFound):
        await apply_template(db, "missing", insp.id)


async def test_template_for_another_type_is_refused(db):
    tpl = await crud.create_template(db, "HUD walk", "HUD")
    room = await crud.create_template_room(db, tpl.id, "Kitchen")
    await crud.create_template_item(db, room.id, "Stove")
    prop = await crud.create_property(db, "P")
    insp = await crud.create_inspection(db, prop.id, "S8 - RFT", dt.date(2026, 7, 1), "09:00")

    with pytest.raises(TemplateTypeMismatch):
        await apply_template(db, tpl.id, insp.id)
    assert await crud.list_subtasks_for_inspection(db, insp.id) == []


async def test_untyped_template_fits_any_inspection(db):
    tpl = await crud.create_template(db, "Generic")
    room = await crud.create_template_room(db, tpl.id, "Bath")
    await crud.create_template_item(db, room.id, "Toilet", vendor_type_id="v-plumbing")
    insp = await _inspection(db)

    result = await apply_template(db, tpl.id, insp.id)

    assert result.subtasks_created == 1
    (toilet,) = await crud.list_subtasks_for_inspection(db, insp.id)
    assert toilet.vendor_type_id == "v-plumbing"
