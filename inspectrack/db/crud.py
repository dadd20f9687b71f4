"""CRUD operations for the inspection tracker tables."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inspectrack.models import (
    Profile, Property, Unit, Floorplan, Inspection, InspectionRun, Subtask, SubtaskActivity,
    InspectionTemplate, TemplateRoom, TemplateItem, TemplateProperty,
    RoomTemplate, RoomTemplateItem, InventoryType, VendorType,
)


async def _apply_updates(db: AsyncSession, row, **kwargs):
    for k, v in kwargs.items():
        setattr(row, k, v)
    await db.commit()
    await db.refresh(row)
    return row


# ── Profile ───────────────────────────────────────────────

async def create_profile(
    db: AsyncSession, email: str, password_hash: str,
    full_name: str | None = None, role: str = "inspector",
) -> Profile:
    profile = Profile(email=email.lower(), password_hash=password_hash, full_name=full_name, role=role)
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def get_profile(db: AsyncSession, profile_id: str) -> Profile | None:
    return await db.get(Profile, profile_id)


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.email == email.lower()))
    return result.scalars().first()


async def list_profiles(db: AsyncSession) -> list[Profile]:
    result = await db.execute(
        select(Profile).where(Profile.is_active == True).order_by(Profile.full_name)
    )
    return list(result.scalars().all())


# ── Property / Unit ───────────────────────────────────────

async def create_property(
    db: AsyncSession, name: str, address: str = "", created_by: str | None = None,
) -> Property:
    prop = Property(name=name, address=address, created_by=created_by)
    db.add(prop)
    await db.commit()
    await db.refresh(prop)
    return prop


async def get_property(db: AsyncSession, property_id: str) -> Property | None:
    return await db.get(Property, property_id)


async def list_properties(db: AsyncSession) -> list[Property]:
    result = await db.execute(select(Property).order_by(Property.name))
    return list(result.scalars().all())


async def update_property(db: AsyncSession, prop: Property, **kwargs) -> Property:
    return await _apply_updates(db, prop, **kwargs)


async def create_unit(
    db: AsyncSession, property_id: str, name: str,
    floorplan_id: str | None = None, created_by: str | None = None,
) -> Unit:
    unit = Unit(property_id=property_id, name=name, floorplan_id=floorplan_id, created_by=created_by)
    db.add(unit)
    await db.commit()
    await db.refresh(unit)
    return unit


async def get_unit(db: AsyncSession, unit_id: str) -> Unit | None:
    return await db.get(Unit, unit_id)


async def list_units_for_property(db: AsyncSession, property_id: str) -> list[Unit]:
    result = await db.execute(
        select(Unit).where(Unit.property_id == property_id).order_by(Unit.name)
    )
    return list(result.scalars().all())


async def update_unit(db: AsyncSession, unit: Unit, **kwargs) -> Unit:
    return await _apply_updates(db, unit, **kwargs)


# ── Inspection ────────────────────────────────────────────

async def create_inspection(
    db: AsyncSession,
    property_id: str,
    type: str,
    date: dt.date,
    time: str,
    unit_id: str | None = None,
    duration: int | None = None,
    parent_inspection_id: str | None = None,
    attachment_url: str | None = None,
    created_by: str | None = None,
) -> Inspection:
    insp = Inspection(
        property_id=property_id, unit_id=unit_id, type=type, date=date, time=time,
        duration=duration, parent_inspection_id=parent_inspection_id,
        attachment_url=attachment_url, created_by=created_by,
    )
    db.add(insp)
    await db.commit()
    await db.refresh(insp)
    return insp


async def get_inspection(db: AsyncSession, inspection_id: str) -> Inspection | None:
    return await db.get(Inspection, inspection_id)


async def list_inspections(
    db: AsyncSession,
    property_id: str | None = None,
    unit_id: str | None = None,
    completed: bool | None = None,
    include_archived: bool = False,
) -> list[Inspection]:
    """List inspections by date/time. Archived rows only appear when asked for."""
    stmt = select(Inspection)
    if property_id is not None:
        stmt = stmt.where(Inspection.property_id == property_id)
    if unit_id is not None:
        stmt = stmt.where(Inspection.unit_id == unit_id)
    if completed is not None:
        stmt = stmt.where(Inspection.completed == completed)
    if not include_archived:
        stmt = stmt.where(Inspection.archived == False)
    result = await db.execute(stmt.order_by(Inspection.date, Inspection.time))
    return list(result.scalars().all())


async def list_inspections_in_range(
    db: AsyncSession, start: dt.date, end: dt.date,
) -> list[Inspection]:
    result = await db.execute(
        select(Inspection)
        .where(Inspection.date >= start, Inspection.date <= end, Inspection.archived == False)
        .order_by(Inspection.date, Inspection.time)
    )
    return list(result.scalars().all())


async def update_inspection(db: AsyncSession, insp: Inspection, **kwargs) -> Inspection:
    return await _apply_updates(db, insp, **kwargs)


# ── Subtask ───────────────────────────────────────────────

async def create_subtask(
    db: AsyncSession,
    inspection_id: str,
    description: str,
    original_inspection_id: str | None = None,
    **fields,
) -> Subtask:
    sub = Subtask(
        inspection_id=inspection_id,
        original_inspection_id=original_inspection_id or inspection_id,
        description=description,
        **fields,
    )
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    return sub


async def get_subtask(db: AsyncSession, subtask_id: str) -> Subtask | None:
    return await db.get(Subtask, subtask_id)


async def list_subtasks_for_inspection(db: AsyncSession, inspection_id: str) -> list[Subtask]:
    result = await db.execute(
        select(Subtask).where(Subtask.inspection_id == inspection_id).order_by(Subtask.created_at)
    )
    return list(result.scalars().all())


async def list_all_subtasks(db: AsyncSession) -> list[Subtask]:
    result = await db.execute(select(Subtask))
    return list(result.scalars().all())


async def update_subtask(db: AsyncSession, sub: Subtask, **kwargs) -> Subtask:
    return await _apply_updates(db, sub, **kwargs)


async def delete_subtask(db: AsyncSession, sub: Subtask) -> None:
    await db.execute(SubtaskActivity.__table__.delete().where(SubtaskActivity.subtask_id == sub.id))
    await db.delete(sub)
    await db.commit()


async def create_subtask_activity(
    db: AsyncSession, subtask_id: str, activity_type: str,
    notes: str | None = None, old_value: str | None = None,
    new_value: str | None = None, created_by: str | None = None,
) -> SubtaskActivity:
    act = SubtaskActivity(
        subtask_id=subtask_id, activity_type=activity_type, notes=notes,
        old_value=old_value, new_value=new_value, created_by=created_by,
    )
    db.add(act)
    await db.commit()
    await db.refresh(act)
    return act


async def list_subtask_activity(db: AsyncSession, subtask_id: str) -> list[SubtaskActivity]:
    result = await db.execute(
        select(SubtaskActivity)
        .where(SubtaskActivity.subtask_id == subtask_id)
        .order_by(SubtaskActivity.created_at)
    )
    return list(result.scalars().all())


# ── Templates ─────────────────────────────────────────────

async def create_template(
    db: AsyncSession, name: str, type: str | None = None, created_by: str | None = None,
) -> InspectionTemplate:
    tpl = InspectionTemplate(name=name, type=type, created_by=created_by)
    db.add(tpl)
    await db.commit()
    await db.refresh(tpl)
    return tpl


async def get_template(db: AsyncSession, template_id: str) -> InspectionTemplate | None:
    # Rooms and items may have been added through other calls in this session
    return await db.get(InspectionTemplate, template_id, populate_existing=True)


async def list_templates(db: AsyncSession, type: str | None = None) -> list[InspectionTemplate]:
    stmt = select(InspectionTemplate)
    if type is not None:
        stmt = stmt.where(InspectionTemplate.type == type)
    result = await db.execute(stmt.order_by(InspectionTemplate.name))
    return list(result.scalars().all())


async def update_template(db: AsyncSession, tpl: InspectionTemplate, **kwargs) -> InspectionTemplate:
    return await _apply_updates(db, tpl, **kwargs)


async def delete_template(db: AsyncSession, tpl: InspectionTemplate) -> None:
    await db.execute(TemplateProperty.__table__.delete().where(TemplateProperty.template_id == tpl.id))
    await db.delete(tpl)
    await db.commit()


async def create_template_room(
    db: AsyncSession, template_id: str, name: str, order_index: int | None = None,
    room_template_id: str | None = None,
) -> TemplateRoom:
    if order_index is None:
        order_index = len(await list_template_rooms(db, template_id))
    room = TemplateRoom(
        template_id=template_id, name=name, order_index=order_index, room_template_id=room_template_id,
    )
    db.add(room)
    await db.commit()
    await db.refresh(room)
    return room


async def get_template_room(db: AsyncSession, room_id: str) -> TemplateRoom | None:
    return await db.get(TemplateRoom, room_id)


async def list_template_rooms(db: AsyncSession, template_id: str) -> list[TemplateRoom]:
    result = await db.execute(
        select(TemplateRoom)
        .where(TemplateRoom.template_id == template_id)
        .order_by(TemplateRoom.order_index)
    )
    return list(result.scalars().all())


async def delete_template_room(db: AsyncSession, room: TemplateRoom) -> None:
    await db.delete(room)
    await db.commit()


async def create_template_item(
    db: AsyncSession, room_id: str, description: str,
    order_index: int | None = None,
    inventory_type_id: str | None = None,
    inventory_quantity: int | None = None,
    vendor_type_id: str | None = None,
) -> TemplateItem:
    if order_index is None:
        order_index = len(await list_template_items(db, room_id))
    item = TemplateItem(
        room_id=room_id, description=description, order_index=order_index,
        inventory_type_id=inventory_type_id, inventory_quantity=inventory_quantity,
        vendor_type_id=vendor_type_id,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def get_template_item(db: AsyncSession, item_id: str) -> TemplateItem | None:
    return await db.get(TemplateItem, item_id)


async def list_template_items(db: AsyncSession, room_id: str) -> list[TemplateItem]:
    result = await db.execute(
        select(TemplateItem)
        .where(TemplateItem.room_id == room_id)
        .order_by(TemplateItem.order_index)
    )
    return list(result.scalars().all())


async def delete_template_item(db: AsyncSession, item: TemplateItem) -> None:
    await db.delete(item)
    await db.commit()


async def link_template_property(db: AsyncSession, template_id: str, property_id: str) -> TemplateProperty:
    result = await db.execute(
        select(TemplateProperty).where(
            TemplateProperty.template_id == template_id,
            TemplateProperty.property_id == property_id,
        )
    )
    existing = result.scalars().first()
    if existing:
        return existing
    link = TemplateProperty(template_id=template_id, property_id=property_id)
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link


async def list_template_property_ids(db: AsyncSession, template_id: str) -> list[str]:
    result = await db.execute(
        select(TemplateProperty.property_id).where(TemplateProperty.template_id == template_id)
    )
    return list(result.scalars().all())


# ── InventoryType ─────────────────────────────────────────

async def create_inventory_type(db: AsyncSession, name: str, created_by: str | None = None) -> InventoryType:
    it = InventoryType(name=name, created_by=created_by)
    db.add(it)
    await db.commit()
    await db.refresh(it)
    return it


async def get_inventory_type(db: AsyncSession, type_id: str) -> InventoryType | None:
    return await db.get(InventoryType, type_id)


async def get_inventory_type_by_name(db: AsyncSession, name: str) -> InventoryType | None:
    result = await db.execute(select(InventoryType).where(InventoryType.name == name))
    return result.scalars().first()


async def list_inventory_types(db: AsyncSession) -> list[InventoryType]:
    result = await db.execute(select(InventoryType).order_by(InventoryType.name))
    return list(result.scalars().all())


async def _clear_references(db: AsyncSession, columns, value: str) -> None:
    for col in columns:
        await db.execute(update(col.class_).where(col == value).values({col.key: None}))


async def delete_inventory_type(db: AsyncSession, it: InventoryType) -> None:
    await _clear_references(
        db, (Subtask.inventory_type_id, TemplateItem.inventory_type_id, RoomTemplateItem.inventory_type_id), it.id,
    )
    await db.delete(it)
    await db.commit()


# ── VendorType ────────────────────────────────────────────

async def create_vendor_type(
    db: AsyncSession, name: str, default_assigned_user_id: str | None = None, created_by: str | None = None,
) -> VendorType:
    vt = VendorType(name=name, default_assigned_user_id=default_assigned_user_id, created_by=created_by)
    db.add(vt)
    await db.commit()
    await db.refresh(vt)
    return vt


async def get_vendor_type(db: AsyncSession, type_id: str) -> VendorType | None:
    return await db.get(VendorType, type_id)


async def get_vendor_type_by_name(db: AsyncSession, name: str) -> VendorType | None:
    result = await db.execute(select(VendorType).where(VendorType.name == name))
    return result.scalars().first()


async def list_vendor_types(db: AsyncSession) -> list[VendorType]:
    result = await db.execute(select(VendorType).order_by(VendorType.name))
    return list(result.scalars().all())


async def update_vendor_type(db: AsyncSession, vt: VendorType, **kwargs) -> VendorType:
    return await _apply_updates(db, vt, **kwargs)


async def delete_vendor_type(db: AsyncSession, vt: VendorType) -> None:
    await _clear_references(
        db, (Subtask.vendor_type_id, TemplateItem.vendor_type_id, RoomTemplateItem.vendor_type_id), vt.id,
    )
    await db.delete(vt)
    await db.commit()


# ── Floorplan ─────────────────────────────────────────────

async def create_floorplan(db: AsyncSession, name: str, created_by: str | None = None) -> Floorplan:
    fp = Floorplan(name=name, created_by=created_by)
    db.add(fp)
    await db.commit()
    await db.refresh(fp)
    return fp


async def get_floorplan(db: AsyncSession, floorplan_id: str) -> Floorplan | None:
    return await db.get(Floorplan, floorplan_id)


async def get_floorplan_by_name(db: AsyncSession, name: str) -> Floorplan | None:
    result = await db.execute(select(Floorplan).where(Floorplan.name == name))
    return result.scalars().first()


async def list_floorplans(db: AsyncSession) -> list[Floorplan]:
    result = await db.execute(select(Floorplan).order_by(Floorplan.name))
    return list(result.scalars().all())


async def delete_floorplan(db: AsyncSession, fp: Floorplan) -> None:
    await _clear_references(db, (Unit.floorplan_id,), fp.id)
    await db.delete(fp)
    await db.commit()


# ── Room library ──────────────────────────────────────────

async def create_room_template(db: AsyncSession, name: str, created_by: str | None = None) -> RoomTemplate:
    rt = RoomTemplate(name=name, created_by=created_by)
    db.add(rt)
    await db.commit()
    await db.refresh(rt)
    return rt


async def get_room_template(db: AsyncSession, room_template_id: str) -> RoomTemplate | None:
    return await db.get(RoomTemplate, room_template_id, populate_existing=True)


async def get_room_template_by_name(db: AsyncSession, name: str) -> RoomTemplate | None:
    result = await db.execute(select(RoomTemplate).where(RoomTemplate.name == name))
    return result.scalars().first()


async def list_room_templates(db: AsyncSession) -> list[RoomTemplate]:
    result = await db.execute(select(RoomTemplate).order_by(RoomTemplate.name))
    return list(result.scalars().all())


async def delete_room_template(db: AsyncSession, rt: RoomTemplate) -> None:
    """Remove a library room. Rooms already copied into templates stay as they are."""
    await _clear_references(db, (TemplateRoom.room_template_id,), rt.id)
    await db.delete(rt)
    await db.commit()


async def create_room_template_item(
    db: AsyncSession, room_template_id: str, description: str,
    order_index: int | None = None,
    inventory_type_id: str | None = None,
    inventory_quantity: int | None = None,
    vendor_type_id: str | None = None,
) -> RoomTemplateItem:
    if order_index is None:
        existing = await db.execute(
            select(RoomTemplateItem.id).where(RoomTemplateItem.room_template_id == room_template_id)
        )
        order_index = len(existing.scalars().all())
    item = RoomTemplateItem(
        room_template_id=room_template_id, description=description, order_index=order_index,
        inventory_type_id=inventory_type_id, inventory_quantity=inventory_quantity,
        vendor_type_id=vendor_type_id,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def get_room_template_item(db: AsyncSession, item_id: str) -> RoomTemplateItem | None:
    return await db.get(RoomTemplateItem, item_id)


async def delete_room_template_item(db: AsyncSession, item: RoomTemplateItem) -> None:
    await db.delete(item)
    await db.commit()


# ── InspectionRun ─────────────────────────────────────────

async def list_runs_for_inspection(db: AsyncSession, inspection_id: str) -> list[InspectionRun]:
    result = await db.execute(
        select(InspectionRun)
        .where(InspectionRun.inspection_id == inspection_id)
        .order_by(InspectionRun.started_at)
    )
    return list(result.scalars().all())


async def list_run_subtasks(db: AsyncSession, run_id: str) -> list[Subtask]:
    result = await db.execute(
        select(Subtask).where(Subtask.inspection_run_id == run_id).order_by(Subtask.created_at, Subtask.id)
    )
    return list(result.scalars().all())
