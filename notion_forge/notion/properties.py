"""Typed Notion page properties and the codec between them and plain values.

A page's property bag is a mapping from property name to one of a closed set
of tagged variants, discriminated on Notion's ``type`` key. Decoding is
lenient: an absent property, a property of another type, or one that does
not parse yields the zero value for the requested kind instead of raising.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from notion_forge.notion.markdown import markdown_to_rich_text, plain_rich_text

logger = logging.getLogger(__name__)


class PropertyKind(str, Enum):
    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    FORMULA = "formula"
    PLACE = "place"
    URL = "url"
    CHECKBOX = "checkbox"
    STATUS = "status"


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TextContent(_Model):
    content: str = ""


class RichTextItem(_Model):
    type: str = "text"
    plain_text: Optional[str] = None
    text: Optional[TextContent] = None

    @property
    def value(self) -> str:
        if self.plain_text is not None:
            return self.plain_text
        return self.text.content if self.text else ""


class SelectOption(_Model):
    name: str = ""


class DateValue(_Model):
    start: Optional[str] = None
    end: Optional[str] = None
    time_zone: Optional[str] = None


class PlaceValue(_Model):
    lat: Optional[float] = None
    lon: Optional[float] = None
    name: Optional[str] = None
    address: Optional[str] = None
    google_place_id: Optional[str] = None
    aws_place_id: Optional[str] = None


class FormulaValue(_Model):
    type: str = "string"
    string: Optional[str] = None
    number: Optional[float] = None
    boolean: Optional[bool] = None
    date: Optional[DateValue] = None


class TitleProperty(_Model):
    type: Literal["title"]
    title: list[RichTextItem] = Field(default_factory=list)


class RichTextProperty(_Model):
    type: Literal["rich_text"]
    rich_text: list[RichTextItem] = Field(default_factory=list)


class NumberProperty(_Model):
    type: Literal["number"]
    number: Optional[float] = None


class SelectProperty(_Model):
    type: Literal["select"]
    select: Optional[SelectOption] = None


class MultiSelectProperty(_Model):
    type: Literal["multi_select"]
    multi_select: list[SelectOption] = Field(default_factory=list)


class DateProperty(_Model):
    type: Literal["date"]
    date: Optional[DateValue] = None


class FormulaProperty(_Model):
    type: Literal["formula"]
    formula: Optional[FormulaValue] = None


class PlaceProperty(_Model):
    type: Literal["place"]
    place: Optional[PlaceValue] = None


class UrlProperty(_Model):
    type: Literal["url"]
    url: Optional[str] = None


class CheckboxProperty(_Model):
    type: Literal["checkbox"]
    checkbox: bool = False


class StatusProperty(_Model):
    type: Literal["status"]
    status: Optional[SelectOption] = None


PropertyValue = Annotated[
    Union[
        TitleProperty,
        RichTextProperty,
        NumberProperty,
        SelectProperty,
        MultiSelectProperty,
        DateProperty,
        FormulaProperty,
        PlaceProperty,
        UrlProperty,
        CheckboxProperty,
        StatusProperty,
    ],
    Field(discriminator="type"),
]
PropertyBag = dict[str, Any]

_adapter: TypeAdapter = TypeAdapter(PropertyValue)


def parse_property(raw: Any):
    """Parse one raw Notion property; unknown or malformed shapes give None."""
    if not isinstance(raw, Mapping):
        return None
    try:
        return _adapter.validate_python(dict(raw))
    except PydanticValidationError:
        logger.debug("Skipping unsupported property | type=%s", raw.get("type"))
        return None


def parse_property_bag(raw_properties: Mapping[str, Any] | None) -> PropertyBag:
    bag: PropertyBag = {}
    for name, raw in (raw_properties or {}).items():
        prop = parse_property(raw)
        if prop is not None:
            bag[name] = prop
    return bag


def _plain(items: list[RichTextItem]) -> str:
    return "".join(item.value for item in items)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _formula_text(formula: FormulaValue | None) -> str:
    if formula is None:
        return ""
    if formula.string is not None:
        return formula.string
    if formula.number is not None:
        return _format_number(formula.number)
    if formula.boolean is not None:
        return "true" if formula.boolean else "false"
    if formula.date is not None and formula.date.start:
        return formula.date.start
    return ""


# kind -> (variant, extractor, zero value)
_DECODERS = {
    PropertyKind.TITLE: (TitleProperty, lambda p: _plain(p.title), ""),
    PropertyKind.RICH_TEXT: (RichTextProperty, lambda p: _plain(p.rich_text), ""),
    PropertyKind.NUMBER: (NumberProperty, lambda p: p.number, 0),
    PropertyKind.SELECT: (SelectProperty, lambda p: p.select.name if p.select else None, ""),
    PropertyKind.MULTI_SELECT: (MultiSelectProperty, lambda p: [o.name for o in p.multi_select], []),
    PropertyKind.DATE: (DateProperty, lambda p: p.date if p.date and p.date.start else None, None),
    PropertyKind.FORMULA: (FormulaProperty, lambda p: _formula_text(p.formula), ""),
    PropertyKind.PLACE: (PlaceProperty, lambda p: p.place, None),
    PropertyKind.URL: (UrlProperty, lambda p: p.url, ""),
    PropertyKind.CHECKBOX: (CheckboxProperty, lambda p: p.checkbox, False),
    PropertyKind.STATUS: (StatusProperty, lambda p: p.status.name if p.status else None, ""),
}


def zero_value(kind: PropertyKind):
    zero = _DECODERS[PropertyKind(kind)][2]
    return list(zero) if isinstance(zero, list) else zero


def decode(bag: Mapping[str, Any], name: str, kind: PropertyKind):
    """Return the plain value of property `name`, or the zero value for `kind`.

    Never raises: the bag may hold raw dicts or parsed variants, and a
    property whose tag does not match `kind` is treated as absent.
    """
    kind = PropertyKind(kind)
    variant, extract, _ = _DECODERS[kind]
    prop = bag.get(name) if bag else None
    if prop is not None and not isinstance(prop, BaseModel):
        prop = parse_property(prop)
    if not isinstance(prop, variant):
        return zero_value(kind)
    value = extract(prop)
    return zero_value(kind) if value is None else value


def first_title(bag: Mapping[str, Any]) -> str:
    """Text of the first title-typed property in the bag, or ""."""
    for name in bag or {}:
        prop = bag[name]
        if not isinstance(prop, BaseModel):
            prop = parse_property(prop)
        if isinstance(prop, TitleProperty):
            return _plain(prop.title)
    return ""


_READ_ONLY = {PropertyKind.FORMULA, PropertyKind.PLACE, PropertyKind.STATUS}


def encode(kind: PropertyKind, value: Any, markdown: bool = False) -> dict:
    """Build the Notion write payload for one property value.

    The caller supplies a value matching `kind`; no type inference happens here.
    """
    kind = PropertyKind(kind)
    if kind in _READ_ONLY:
        raise ValueError(f"{kind.value} properties are read-only")
    if kind in (PropertyKind.TITLE, PropertyKind.RICH_TEXT):
        text = "" if value is None else str(value)
        rich_text = markdown_to_rich_text(text) if markdown else plain_rich_text(text)
        return {kind.value: rich_text}
    if kind == PropertyKind.SELECT:
        return {"select": {"name": str(value)} if value else None}
    if kind == PropertyKind.MULTI_SELECT:
        return {"multi_select": [{"name": str(v)} for v in value or [] if v]}
    if kind == PropertyKind.DATE:
        if value is None:
            return {"date": None}
        if isinstance(value, DateValue):
            return {"date": value.model_dump(exclude_none=True)}
        return {"date": dict(value)}
    if kind == PropertyKind.NUMBER:
        return {"number": value}
    if kind == PropertyKind.URL:
        return {"url": value or None}
    return {"checkbox": bool(value)}
