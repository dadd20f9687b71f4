from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from inspectrack.models.base import Base, ULIDMixin


class Subtask(Base, ULIDMixin):
    __tablename__ = "subtasks"

    inspection_id: Mapped[str] = mapped_column(String(26), ForeignKey("inspections.id"), index=True)
    # Lineage anchor shared by copies carried into follow-up inspections
    original_inspection_id: Mapped[str] = mapped_column(String(26), ForeignKey("inspections.id"), index=True)
    description: Mapped[str] = mapped_column(Text)
    room_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    assigned_users: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    attachment_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    inventory_type_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("inventory_types.id", ondelete="SET NULL"), nullable=True,
    )
    inventory_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    vendor_type_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("vendor_types.id", ondelete="SET NULL"), nullable=True,
    )
    # Set when the item was recorded during a template run
    inspection_run_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("inspection_runs.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # pending | pass | fail | good | bad
    status_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status_changed_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)


class SubtaskActivity(Base, ULIDMixin):
    __tablename__ = "subtask_activity"

    subtask_id: Mapped[str] = mapped_column(String(26), ForeignKey("subtasks.id", ondelete="CASCADE"), index=True)
    activity_type: Mapped[str] = mapped_column(String(50))  # note_added | status_changed | ...
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    old_value: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    new_value: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)
