import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as JsonSchemaError
from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "settings.json"
COLOUR_COUNT = 6

_POSITIVE_NUMBER = {"type": "number", "exclusiveMinimum": 0}
_UNEMPTY_STRING = {"type": "string", "minLength": 1}

SETTINGS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["width", "offset", "barHeight", "padding", "colours"],
    "properties": {
        "width": _POSITIVE_NUMBER,
        "offset": {
            "type": "object",
            "required": ["x", "y"],
            "properties": {"x": _POSITIVE_NUMBER, "y": _POSITIVE_NUMBER},
        },
        "barHeight": _POSITIVE_NUMBER,
        "padding": _POSITIVE_NUMBER,
        "colours": {
            "type": "array",
            "minItems": COLOUR_COUNT,
            "maxItems": COLOUR_COUNT,
            "items": {
                "type": "object",
                "required": ["name", "value", "fg"],
                "properties": {
                    "name": _UNEMPTY_STRING,
                    "value": _UNEMPTY_STRING,
                    "fg": _UNEMPTY_STRING,
                },
            },
        },
    },
}

# Order in which violations are reported; the first one wins.
_FIELD_MESSAGES = [
    ((), "Invalid SVG settings"),
    (("width",), "Invalid SVG width"),
    (("offset",), "Invalid SVG offset"),
    (("offset", "x"), "Invalid SVG x offset"),
    (("offset", "y"), "Invalid SVG y offset"),
    (("barHeight",), "Invalid SVG bar height"),
    (("padding",), "Invalid SVG padding"),
    (("colours",), "Invalid SVG colours"),
]
_COLOUR_FIELD_MESSAGES = {
    None: "Invalid SVG colour",
    "name": "Invalid SVG colour name",
    "value": "Invalid SVG colour value",
    "fg": "Invalid SVG foreground colour",
}
_COLOUR_FIELD_ORDER = [None, "name", "value", "fg"]


Number = Union[int, float]


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: Number
    y: Number


class Colour(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    fg: str


class SvgSettings(BaseModel):
    """Validated visual constants for the waterfall chart, shared read-only."""

    # Keys outside the schema are kept for custom templates.
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    width: Number
    offset: Point
    bar_height: Number = Field(..., alias="barHeight")
    padding: Number
    colours: Tuple[Colour, ...]
    x_axis: Point = Field(..., alias="xAxis")
    resource_height: Number = Field(..., alias="resourceHeight")
    bar_padding: int = Field(..., alias="barPadding")
    template_path: Optional[str] = Field(None, alias="svgTemplate", exclude=True)

    def as_template_dict(self) -> Dict[str, Any]:
        """Settings keyed the way templates and JSON consumers expect them."""
        return self.model_dump(by_alias=True)


def _violation(error: JsonSchemaError) -> List[Tuple[Tuple, str]]:
    path = tuple(error.absolute_path)
    if error.validator == "required" and isinstance(error.instance, dict):
        return [(path + (name,), "required") for name in error.validator_value if name not in error.instance]
    return [(path, error.validator)]


def _describe(path: Tuple, validator: str) -> Tuple[Tuple, str]:
    if path[:1] == ("colours",) and len(path) > 1:
        index = path[1]
        field = path[2] if len(path) > 2 else None
        rank = (len(_FIELD_MESSAGES) + 1, index, _COLOUR_FIELD_ORDER.index(field))
        return rank, f"{_COLOUR_FIELD_MESSAGES[field]} [{index}]"

    if path == ("colours",) and validator in ("minItems", "maxItems"):
        return (len(_FIELD_MESSAGES),), "Incorrect number of SVG colours"

    for rank, (field_path, message) in enumerate(_FIELD_MESSAGES):
        if field_path == path:
            return (rank,), message

    return (len(_FIELD_MESSAGES) + 2,), f"Invalid SVG setting '{'.'.join(str(p) for p in path)}'"


def verify_settings(raw: Any, source: Optional[str] = None) -> None:
    """
    Check raw settings against the settings schema.

    Raises:
        ConfigurationError: naming the first offending field; `details` holds
            every violation found.
    """
    violations = {}
    for error in Draft7Validator(SETTINGS_SCHEMA).iter_errors(raw):
        for path, validator in _violation(error):
            rank, message = _describe(path, validator)
            violations.setdefault(message, rank)

    if violations:
        messages = sorted(violations, key=violations.get)
        raise ConfigurationError(messages[0], source, messages)


def derive_settings(raw: Mapping[str, Any], template_path: Optional[str] = None) -> SvgSettings:
    offset = raw["offset"]
    return SvgSettings.model_validate({
        **raw,
        "xAxis": {
            "x": raw["width"] / 1.8,
            "y": offset["y"] / 2 - raw["padding"],
        },
        "resourceHeight": raw["barHeight"] + raw["padding"],
        "barPadding": math.floor(raw["padding"] / 2),
        "svgTemplate": template_path,
    })


def settings_from_dict(raw: Any, source: Optional[str] = None,
                       template_path: Optional[str] = None) -> SvgSettings:
    verify_settings(raw, source)
    return derive_settings(raw, template_path)


def load_settings(options: Optional[Mapping[str, Any]] = None) -> SvgSettings:
    """
    Load, validate and derive SVG settings.

    Args:
        options: mapping with optional `svgSettings` (JSON path, defaults to the
            bundled settings) and `svgTemplate` (template path) entries.
    """
    options = options or {}
    path = Path(options.get("svgSettings") or DEFAULT_SETTINGS_PATH)

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError("SVG settings file not found", str(path))
    except json.JSONDecodeError as e:
        raise ConfigurationError("Failed to parse SVG settings", str(path), e)

    settings = settings_from_dict(raw, str(path), options.get("svgTemplate"))
    logger.info(f"Loaded SVG settings from {path}")
    return settings
