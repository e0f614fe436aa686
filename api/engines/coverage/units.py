"""
Length and area unit conversion for the coverage engine.

Rooms arrive from room analysis in feet while catalog tiles are sized in
inches (or millimetres on vendor sites), so every conversion between the two
goes through the helpers here instead of inline multipliers.
"""
import re
from enum import Enum
from typing import Union

from .errors import InvalidDimension, UnknownUnit
from .schemas import TileUnit

SQ_IN_PER_SQ_FT = 144


class LengthUnit(str, Enum):
    INCH = "in"
    FOOT = "ft"
    METER = "m"
    CENTIMETER = "cm"
    MILLIMETER = "mm"


# Inches in one of each unit
INCHES_PER_UNIT = {
    LengthUnit.INCH: 1.0,
    LengthUnit.FOOT: 12.0,
    LengthUnit.METER: 1 / 0.0254,
    LengthUnit.CENTIMETER: 1 / 2.54,
    LengthUnit.MILLIMETER: 1 / 25.4,
}

# Spellings seen in catalog size strings
_UNIT_ALIASES = {
    "in": LengthUnit.INCH,
    "inch": LengthUnit.INCH,
    "inches": LengthUnit.INCH,
    '"': LengthUnit.INCH,
    "ft": LengthUnit.FOOT,
    "feet": LengthUnit.FOOT,
    "foot": LengthUnit.FOOT,
    "'": LengthUnit.FOOT,
    "m": LengthUnit.METER,
    "cm": LengthUnit.CENTIMETER,
    "mm": LengthUnit.MILLIMETER,
}

# The unit must not run into a following word: "600x600 matte" has no unit
_SIZE_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*[xX×*]\s*(\d+(?:\.\d+)?)\s*(?:(mm|cm|inches|inch|in|feet|foot|ft|m|\"|')(?![A-Za-z]))?"
)


def _unit(unit: Union[LengthUnit, str]) -> LengthUnit:
    if isinstance(unit, LengthUnit):
        return unit
    alias = _UNIT_ALIASES.get(unit.strip().lower())
    if alias is None:
        raise UnknownUnit(unit)
    return alias


def convert_length(value: float, from_unit: Union[LengthUnit, str], to_unit: Union[LengthUnit, str]) -> float:
    """
    Convert a length between any two supported units.

    Raises:
        UnknownUnit: if either unit is not one of in/ft/m/cm/mm or a known spelling
    """
    source, target = _unit(from_unit), _unit(to_unit)
    if source == target:
        return value
    return value * INCHES_PER_UNIT[source] / INCHES_PER_UNIT[target]


def square_feet_to_square_inches(area_sq_ft: float) -> float:
    return area_sq_ft * SQ_IN_PER_SQ_FT


def convert_tile(tile: TileUnit, from_unit: Union[LengthUnit, str], to_unit: Union[LengthUnit, str]) -> TileUnit:
    return TileUnit(
        width=convert_length(tile.width, from_unit, to_unit),
        height=convert_length(tile.height, from_unit, to_unit),
    )


def parse_tile_size(size: str, default_unit: Union[LengthUnit, str] = LengthUnit.MILLIMETER) -> TileUnit:
    """
    Parse a catalog size string into a tile footprint in inches.

    Accepts vendor formats such as "600x1200 mm", "12 x 24 in", "2x2 ft" or a
    bare "600X600" (read in ``default_unit``).

    Raises:
        InvalidDimension: if no width x height pair is present or a side is 0
    """
    match = _SIZE_PATTERN.search(size or "")
    if not match:
        raise InvalidDimension("tile size", size, f"Could not read a width x height pair from {size!r}")

    width, height = float(match.group(1)), float(match.group(2))
    if width <= 0:
        raise InvalidDimension("tile.width", width)
    if height <= 0:
        raise InvalidDimension("tile.height", height)

    unit = _unit(match.group(3)) if match.group(3) else _unit(default_unit)
    return convert_tile(TileUnit(width=width, height=height), unit, LengthUnit.INCH)
