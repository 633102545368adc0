from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ContentType = Literal["text", "list-items", "list-sections"]
Direction = Literal["vertical", "horizontal"]
AtsField = Literal[
    "name",
    "title",
    "email",
    "phone",
    "location",
    "linkedin",
    "website",
    "contact",
    "summary",
    "text",
]
SemanticTag = Literal["h1", "h2", "h3", "h4", "h5", "h6", "p", "address", "span", "div", "li"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Rect(CamelModel):
    x: float
    y: float
    width: float
    height: float


class Element(Rect):
    id: str = Field(min_length=1)
    type: str = "text"
    content: str = ""
    font_size: float | None = None
    font_weight: str | None = None
    font_family: str | None = None
    color: str | None = None
    text_align: str | None = None
    line_height: float | str | None = None
    parent_section: str | None = None
    ats_field: AtsField | None = None
    semantic_tag: SemanticTag | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _none_content_is_empty(cls, value):
        return "" if value is None else value

    @field_validator("font_weight", mode="before")
    @classmethod
    def _numeric_font_weight(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value

    @field_validator("parent_section", "ats_field", "semantic_tag", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EntryBlock(CamelModel):
    type: Literal["entry"] = "entry"
    title: str = ""
    subtitle: str | None = None
    bullets: list[str] = Field(default_factory=list)


class ListBlock(CamelModel):
    type: Literal["list"] = "list"
    items: list[str] = Field(default_factory=list)


class TextBlock(CamelModel):
    type: Literal["text"] = "text"
    content: str = ""


FilledBlock = Annotated[Union[EntryBlock, ListBlock, TextBlock], Field(discriminator="type")]


class Section(Rect):
    id: str = Field(min_length=1)
    type: str = "section"
    title: str = ""
    content_type: ContentType = "text"
    direction: Direction = "vertical"
    parent_section: str | None = None
    filled_content: list[FilledBlock] | None = None
    filled: bool = False
    item_count: int | None = Field(default=None, ge=0)
    ats_header: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _none_title_is_empty(cls, value):
        return "" if value is None else value

    @field_validator("parent_section", mode="before")
    @classmethod
    def _blank_parent_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
