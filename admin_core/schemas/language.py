# File: admin_core/schemas/language.py

"""
Pydantic schemas for languages.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from admin_core.schemas.common import CanonicalModel, TimestampedModel

DEFAULT_YES = "YES"
DEFAULT_NO = "NO"

DefaultFlag = Literal["YES", "NO"]
Direction = Literal["ltr", "rtl"]


class LanguageSummary(CanonicalModel):
    """Language reference attached to grouped rows on populated reads."""

    public_id: str
    name: str
    code: str
    iso2: Optional[str] = None
    direction: str = "ltr"
    flag_image: Optional[str] = None


class Language(TimestampedModel):
    """
    Canonical language record.

    ``code`` is the folder name ("en", "fr"); the relational backend stores it
    in a column named ``folder``.
    """

    id: str
    public_id: str
    name: str
    code: str
    iso2: str
    iso3: str
    direction: str = "ltr"
    flag_image: Optional[str] = None
    status: bool = True
    is_default: str = DEFAULT_NO

    @property
    def default(self) -> bool:
        return self.is_default == DEFAULT_YES

    def summary(self) -> LanguageSummary:
        return LanguageSummary(**self.model_dump(include=set(LanguageSummary.model_fields)))


def _upper(v: Optional[str]) -> Optional[str]:
    return v.strip().upper() if isinstance(v, str) else v


class LanguageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20, description="Folder code, e.g. 'en'")
    iso2: str = Field(..., min_length=2, max_length=2)
    iso3: str = Field(..., min_length=3, max_length=3)
    direction: Direction = "ltr"
    flag_image: Optional[str] = Field(None, description="Existing flag image path")
    status: bool = True
    is_default: DefaultFlag = DEFAULT_NO

    @field_validator("iso2", "iso3", mode="before")
    @classmethod
    def uppercase_iso(cls, v):
        return _upper(v)

    @field_validator("name", "code", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class LanguageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    iso2: Optional[str] = Field(None, min_length=2, max_length=2)
    iso3: Optional[str] = Field(None, min_length=3, max_length=3)
    direction: Optional[Direction] = None
    status: Optional[bool] = None
    is_default: Optional[DefaultFlag] = None

    @field_validator("iso2", "iso3", mode="before")
    @classmethod
    def uppercase_iso(cls, v):
        return _upper(v)

    @field_validator("name", "code", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v
