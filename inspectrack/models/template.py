from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Integer, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inspectrack.models.base import Base, ULIDMixin


class InspectionTemplate(Base, ULIDMixin):
    __tablename__ = "inspection_templates"

    name: Mapped[str] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)

    rooms = relationship(
        "TemplateRoom", back_populates="template", lazy="selectin",
        cascade="all, delete-orphan", order_by="TemplateRoom.order_index",
    )


class TemplateRoom(Base, ULIDMixin):
    __tablename__ = "template_rooms"

    template_id: Mapped[str] = mapped_column(String(26), ForeignKey("inspection_templates.id"))
    name: Mapped[str] = mapped_column(String(255))
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    # Library room this one was copied from, if any
    room_template_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("room_templates.id", ondelete="SET NULL"), nullable=True,
    )

    template = relationship("InspectionTemplate", back_populates="rooms")
    items = relationship(
        "TemplateItem", back_populates="room", lazy="selectin",
        cascade="all, delete-orphan", order_by="TemplateItem.order_index",
    )


class TemplateItem(Base, ULIDMixin):
    __tablename__ = "template_items"

    room_id: Mapped[str] = mapped_column(String(26), ForeignKey("template_rooms.id"))
    description: Mapped[str] = mapped_column(Text)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    inventory_type_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("inventory_types.id", ondelete="SET NULL"), nullable=True,
    )
    inventory_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    vendor_type_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("vendor_types.id", ondelete="SET NULL"), nullable=True,
    )

    room = relationship("TemplateRoom", back_populates="items")


class TemplateProperty(Base, ULIDMixin):
    __tablename__ = "template_properties"

    template_id: Mapped[str] = mapped_column(String(26), ForeignKey("inspection_templates.id"))
    property_id: Mapped[str] = mapped_column(String(26), ForeignKey("properties.id"))


# ── Room library ─────────────────────────────────────────

class RoomTemplate(Base, ULIDMixin):
    """A reusable room (name plus default items) that templates copy from."""

    __tablename__ = "room_templates"

    name: Mapped[str] = mapped_column(String(255), unique=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)

    items = relationship(
        "RoomTemplateItem", back_populates="room_template", lazy="selectin",
        cascade="all, delete-orphan", order_by="RoomTemplateItem.order_index",
    )


class RoomTemplateItem(Base, ULIDMixin):
    __tablename__ = "room_template_items"

    room_template_id: Mapped[str] = mapped_column(String(26), ForeignKey("room_templates.id"))
    description: Mapped[str] = mapped_column(Text)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    inventory_type_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("inventory_types.id", ondelete="SET NULL"), nullable=True,
    )
    inventory_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    vendor_type_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("vendor_types.id", ondelete="SET NULL"), nullable=True,
    )

    room_template = relationship("RoomTemplate", back_populates="items")
