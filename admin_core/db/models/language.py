# File: admin_core/db/models/language.py

from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from admin_core.db.models.base import Base, KeyMixin, TimestampMixin


class LanguageModel(Base, KeyMixin, TimestampMixin):
    """
    Language table.

    Attributes:
        name: Display name, unique
        folder: Short language code used for asset folders ("en", "fr"), unique
        iso2: Upper-case ISO 639-1 code, unique
        iso3: Upper-case ISO 639-2 code, unique
        direction: Text direction, "ltr" or "rtl"
        flag_image: Stored flag image path
        status: Active flag
        is_default: "YES" for the single default language, otherwise "NO"
    """

    __tablename__ = "languages"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    folder: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    iso2: Mapped[str] = mapped_column(String(2), unique=True, nullable=False)
    iso3: Mapped[str] = mapped_column(String(3), unique=True, nullable=False)
    direction: Mapped[str] = mapped_column(String(3), default="ltr", nullable=False)
    flag_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_default: Mapped[str] = mapped_column(String(3), default="NO", nullable=False)

    def __repr__(self):
        return f"<LanguageModel(id={self.id}, folder='{self.folder}', is_default='{self.is_default}')>"
