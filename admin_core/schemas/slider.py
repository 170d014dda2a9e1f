# File: admin_core/schemas/slider.py

"""
Pydantic schemas for homepage sliders.

Sliders are grouped multi-language entities. Each language variant carries its
own copy of the slider image so that localized artwork can be swapped per
language without touching siblings.
"""

from typing import Optional

from pydantic import BaseModel, Field

from admin_core.schemas.common import TimestampedModel
from admin_core.schemas.language import LanguageSummary

DEFAULT_COLORS = {
    "title_color": "#000000",
    "description_color": "#000000",
    "button_title_color": "#FFFFFF",
    "button_background": "#007BFF",
    "description_two_color": "#666666",
    "button_two_color": "#FFFFFF",
    "button_background_two": "#28A745",
}

COLOR_FIELDS = ("custom_color",) + tuple(DEFAULT_COLORS)
LINK_FIELDS = ("button_link", "button_link_two")


class Slider(TimestampedModel):
    id: str
    public_id: str
    unique_code: int
    language_id: str
    language: Optional[LanguageSummary] = None
    title: str
    description: Optional[str] = None
    button_title: Optional[str] = None
    button_link: Optional[str] = None
    slider_image: Optional[str] = None
    custom_color: Optional[str] = None
    title_color: str = DEFAULT_COLORS["title_color"]
    description_color: str = DEFAULT_COLORS["description_color"]
    button_title_color: str = DEFAULT_COLORS["button_title_color"]
    button_background: str = DEFAULT_COLORS["button_background"]
    description_two: Optional[str] = None
    button_title_two: Optional[str] = None
    button_link_two: Optional[str] = None
    description_two_color: str = DEFAULT_COLORS["description_two_color"]
    button_two_color: str = DEFAULT_COLORS["button_two_color"]
    button_background_two: str = DEFAULT_COLORS["button_background_two"]
    status: bool = True
    use_count: int = 0


class SliderCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    button_title: Optional[str] = Field(None, max_length=100)
    button_link: Optional[str] = None
    custom_color: Optional[str] = None
    title_color: str = DEFAULT_COLORS["title_color"]
    description_color: str = DEFAULT_COLORS["description_color"]
    button_title_color: str = DEFAULT_COLORS["button_title_color"]
    button_background: str = DEFAULT_COLORS["button_background"]
    description_two: Optional[str] = None
    button_title_two: Optional[str] = Field(None, max_length=100)
    button_link_two: Optional[str] = None
    description_two_color: str = DEFAULT_COLORS["description_two_color"]
    button_two_color: str = DEFAULT_COLORS["button_two_color"]
    button_background_two: str = DEFAULT_COLORS["button_background_two"]
    status: bool = True
    language_public_id: Optional[str] = None


class SliderUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    button_title: Optional[str] = Field(None, max_length=100)
    button_link: Optional[str] = None
    custom_color: Optional[str] = None
    title_color: Optional[str] = None
    description_color: Optional[str] = None
    button_title_color: Optional[str] = None
    button_background: Optional[str] = None
    description_two: Optional[str] = None
    button_title_two: Optional[str] = Field(None, max_length=100)
    button_link_two: Optional[str] = None
    description_two_color: Optional[str] = None
    button_two_color: Optional[str] = None
    button_background_two: Optional[str] = None
    status: Optional[bool] = None
