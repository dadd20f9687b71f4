from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from inspectrack.models.base import Base, ULIDMixin


class InventoryType(Base, ULIDMixin):
    __tablename__ = "inventory_types"

    name: Mapped[str] = mapped_column(String(255), unique=True)
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)
