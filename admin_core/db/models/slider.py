# File: admin_core/db/models/slider.py

from typing import Optional

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from admin_core.db.models.base import Base, GroupedEntityMixin, KeyMixin, TimestampMixin
from admin_core.db.models.language import LanguageModel


class SliderModel(Base, KeyMixin, GroupedEntityMixin, TimestampMixin):
    """One language variant of a homepage slider."""

    __tablename__ = "sliders"
    __table_args__ = (
        UniqueConstraint("unique_code", "language_id", name="uq_slider_code_language"),
    )

    language_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("languages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    button_title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    button_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    slider_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    custom_color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    title_color: Mapped[str] = mapped_column(String(7), default="#000000")
    description_color: Mapped[str] = mapped_column(String(7), default="#000000")
    button_title_color: Mapped[str] = mapped_column(String(7), default="#FFFFFF")
    button_background: Mapped[str] = mapped_column(String(7), default="#007BFF")
    description_two: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    button_title_two: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    button_link_two: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description_two_color: Mapped[str] = mapped_column(String(7), default="#666666")
    button_two_color: Mapped[str] = mapped_column(String(7), default="#FFFFFF")
    button_background_two: Mapped[str] = mapped_column(String(7), default="#28A745")

    language: Mapped[LanguageModel] = relationship(LanguageModel, lazy="raise")
