from __future__ import annotations

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from inspectrack.models.base import Base, ULIDMixin


class VendorType(Base, ULIDMixin):
    __tablename__ = "vendor_types"

    name: Mapped[str] = mapped_column(String(255), unique=True)
    # Profile that new tasks of this vendor type go to when nobody is picked
    default_assigned_user_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True,
    )
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)
