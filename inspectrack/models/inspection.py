from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import String, Boolean, Date, DateTime, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inspectrack.models.base import Base, ULIDMixin

INSPECTION_TYPES = (
    "S8 - RFT",
    "S8 - 1st Annual",
    "S8 - Reinspection",
    "S8 - Abatement Cure",
    "Rental License",
    "HUD",
)


class Inspection(Base, ULIDMixin):
    __tablename__ = "inspections"

    property_id: Mapped[str] = mapped_column(String(26), ForeignKey("properties.id"))
    unit_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("units.id"), nullable=True)
    type: Mapped[str] = mapped_column(String(50))
    date: Mapped[dt.date] = mapped_column(Date)
    time: Mapped[str] = mapped_column(String(10))  # HH:MM
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes
    parent_inspection_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("inspections.id", ondelete="SET NULL"), nullable=True,
    )
    inspection_template_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("inspection_templates.id", ondelete="SET NULL"), nullable=True,
    )
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_by: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("profiles.id"), nullable=True)
    attachment_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    # Kept for analytics but hidden from regular views
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("profiles.id"), nullable=True)

    property = relationship("Property", lazy="selectin")
    unit = relationship("Unit", lazy="selectin")


class InspectionRun(Base, ULIDMixin):
    """One walk through a template's checklist for an inspection."""

    __tablename__ = "inspection_runs"

    inspection_id: Mapped[str] = mapped_column(String(26), ForeignKey("inspections.id"), index=True)
    template_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("inspection_templates.id", ondelete="SET NULL"), nullable=True,
    )
    started_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)
    started_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)
