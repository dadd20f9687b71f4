import datetime as dt

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from inspectrack.db import crud
from inspectrack.models import Base
from inspectrack.services.tasks import assigned_tasks

TODAY = dt.date(2026, 6, 10)


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
    prop = await crud.create_property(db, "Birch")
    past = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 6, 1), "09:00")
    today = await crud.create_inspection(db, prop.id, "HUD", TODAY, "09:00")
    later = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 7, 1), "09:00")
    gone = await crud.create_inspection(db, prop.id, "HUD", dt.date(2026, 7, 2), "09:00")
    await crud.update_inspection(db, gone, archived=True)

    await crud.create_subtask(db, later.id, "Paint", assigned_users=["u1"])
    await crud.create_subtask(db, past.id, "Sink", assigned_users=["u1", "u2"])
    await crud.create_subtask(db, past.id, "Stove", assigned_users=["u2"])
    await crud.create_subtask(db, today.id, "Door", assigned_users=["u1"])
    await crud.create_subtask(db, today.id, "Done already", assigned_users=["u1"], completed=True)
    await crud.create_subtask(db, gone.id, "Archived", assigned_users=["u1"])
    return past, today, later


async def test_only_my_open_tasks_split_by_date(db):
    past, today, later = await _setup(db)

    board = await assigned_tasks(db, "u1", today=TODAY)

    assert [g.inspection.id for g in board.upcoming] == [today.id, later.id]
    assert [[t.description for t in g.tasks] for g in board.upcoming] == [["Door"], ["Paint"]]
    (overdue,) = board.overdue
    assert overdue.inspection.id == past.id
    assert [t.description for t in overdue.tasks] == ["Sink"]


async def test_show_all_ignores_assignment(db):
    past, today, later = await _setup(db)

    board = await assigned_tasks(db, "nobody", show_all=True, today=TODAY)

    (overdue,) = board.overdue
    assert sorted(t.description for t in overdue.tasks) == ["Sink", "Stove"]
    assert sum(len(g.tasks) for g in board.upcoming) == 2


async def test_no_assignments_means_empty_board(db):
    await _setup(db)
    board = await assigned_tasks(db, "u3", today=TODAY)
    assert board.upcoming == [] and board.overdue == []
