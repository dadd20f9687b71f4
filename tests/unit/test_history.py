import datetime as dt

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inspectrack.db import crud
from inspectrack.models import Base, InspectionRun
from inspectrack.services.history import inspection_history


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


async def _setup(db):
    inspector = await crud.create_profile(db, "ann@example.com", "x", "Ann")
    prop = await crud.create_property(db, "Birch")
    unit = await crud.create_unit(db, prop.id, "3")
    first = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 1, 5), "09:00", unit_id=unit.id)
    follow = await crud.create_inspection(
        db, prop.id, "S8 - Reinspection", dt.date(2026, 2, 5), "09:00",
        unit_id=unit.id, parent_inspection_id=first.id,
    )
    other_unit = await crud.create_unit(db, prop.id, "4")
    await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 1, 6), "09:00", unit_id=other_unit.id)

    run = InspectionRun(inspection_id=first.id, started_by=inspector.id, started_at=dt.datetime.now(dt.timezone.utc))
    db.add(run)
    await db.commit()

    await crud.create_subtask(db, first.id, "Smoke detector", room_name="Hall", status="fail", inspection_run_id=run.id)
    await crud.create_subtask(db, first.id, "Sink", room_name="Kitchen", status="pass", inspection_run_id=run.id)
    # added by hand, outside any run
    await crud.create_subtask(db, first.id, "Loose tile", room_name="Kitchen", status="bad")
    await crud.create_subtask(
        db, follow.id, "Smoke detector", room_name="Hall", status="pass",
        original_inspection_id=first.id, completed=True,
    )
    for insp in (first, follow):
        await crud.update_inspection(db, insp, completed=True, completed_by=inspector.id)
    return first, follow


async def test_history_shows_problem_items_with_current_status(db):
    first, follow = await _setup(db)

    entries = await inspection_history(db, follow)

    assert [e.id for e in entries] == [follow.id, first.id]
    assert entries[0].subtasks == []
    older = entries[1]
    assert older.unit_name == "3"
    assert older.property_name == "Birch"
    assert older.completed_by_name == "Ann"
    assert len(older.subtasks) == 1
    item = older.subtasks[0]
    assert item.description == "Smoke detector"
    assert (item.initial_status, item.current_status) == ("fail", "pass")
    assert item.status_changed is True


async def test_history_show_all_items_skips_unrun(db):
    first, follow = await _setup(db)
    entries = await inspection_history(db, first, show_all_items=True)
    older = next(e for e in entries if e.id == first.id)
    assert sorted(s.description for s in older.subtasks) == ["Sink", "Smoke detector"]
    sink = next(s for s in older.subtasks if s.description == "Sink")
    assert sink.status_changed is False
