# File: admin_core/db/models/dropdown_option.py

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from admin_core.db.models.base import Base, GroupedEntityMixin, KeyMixin, TimestampMixin
from admin_core.db.models.language import LanguageModel


class DropdownOptionModel(Base, KeyMixin, GroupedEntityMixin, TimestampMixin):
    """One language variant of a dropdown option."""

    __tablename__ = "dropdown_options"
    __table_args__ = (
        UniqueConstraint("unique_code", "language_id", name="uq_dropdown_code_language"),
    )

    language_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("languages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dropdown_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    country_short_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    language: Mapped[LanguageModel] = relationship(LanguageModel, lazy="raise")
