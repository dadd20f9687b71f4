from __future__ import annotations

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inspectrack.models.base import Base, ULIDMixin


class Property(Base, ULIDMixin):
    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String(255))
    address: Mapped[str] = mapped_column(String(500), default="")
    created_by: Mapped[str | None] = mapped_column(String(26), ForeignKey("profiles.id"), nullable=True)

    units = relationship("Unit", back_populates="property", lazy="selectin", order_by="Unit.name")


class Floorplan(Base, ULIDMixin):
    __tablename__ = "floorplans"

    name: Mapped[str] = mapped_column(String(255), unique=True)
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)


class Unit(Base, ULIDMixin):
    __tablename__ = "units"

    property_id: Mapped[str] = mapped_column(String(26), ForeignKey("properties.id"))
    name: Mapped[str] = mapped_column(String(255))
    floorplan_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("floorplans.id", ondelete="SET NULL"), nullable=True,
    )
    created_by: Mapped[str | None] = mapped_column(String(26), ForeignKey("profiles.id"), nullable=True)

    property = relationship("Property", back_populates="units")
    floorplan = relationship("Floorplan", lazy="selectin")
