"""
Grid-based tile layout.

Lays whole tiles from one corner of a surface and reports how many rows and
columns fit plus the uncovered strips along the far edges. In partial mode
every partly covered edge cell is charged one full tile, which is what gets
cut on site.

Usage:
    usage = compute_tile_layout(Surface(width=10, height=10), TileUnit(width=3, height=3))
    usage.total_tiles  # 9, leftover 1 x 1
"""
import math
from typing import Iterable, List, Mapping, Union

from .errors import InvalidDimension
from .schemas import Surface, SurfaceLayout, TileUnit, TileUsage

# Quotients are snapped to this many decimals before floor/ceil so that
# 0.3 / 0.1 counts as 3 tiles, not 2.
QUOTIENT_PRECISION = 9


def _as_surface(value: Union[Surface, Mapping]) -> Surface:
    return value if isinstance(value, Surface) else Surface.model_validate(value)


def _as_tile(value: Union[TileUnit, Mapping]) -> TileUnit:
    return value if isinstance(value, TileUnit) else TileUnit.model_validate(value)


def _quotient(field: str, length: float, step: float) -> float:
    ratio = round(length / step, QUOTIENT_PRECISION)
    if not math.isfinite(ratio):
        raise InvalidDimension(field, length, f"{field} ({length:g}) is too large to count in tiles of {step:g}")
    return ratio


def _leftover(length: float, count: int, step: float) -> float:
    return max(0.0, round(length - count * step, QUOTIENT_PRECISION))


def validate_rect(prefix: str, width: float, height: float) -> None:
    """Raise InvalidDimension unless both sides are finite and positive."""
    for side, value in (("width", width), ("height", height)):
        if value is None or not math.isfinite(value) or value <= 0:
            raise InvalidDimension(f"{prefix}.{side}", value)


def compute_tile_layout(
    surface: Union[Surface, Mapping],
    tile: Union[TileUnit, Mapping],
    allow_partial: bool = False,
) -> TileUsage:
    """
    Compute how one tile lays out over one surface.

    Both arguments must share a length unit.

    Args:
        surface: Plane to cover
        tile: Tile footprint
        allow_partial: Charge cut edge tiles as whole tiles

    Returns:
        TileUsage with floor-division rows/columns and leftovers in both modes;
        total_tiles is rows * columns, or the per-axis ceiling product when
        allow_partial is set

    Raises:
        InvalidDimension: if any surface or tile side is zero, negative or not
            finite, or the surface holds more tiles than a float can count
    """
    surface = _as_surface(surface)
    tile = _as_tile(tile)
    validate_rect("surface", surface.width, surface.height)
    validate_rect("tile", tile.width, tile.height)

    width_ratio = _quotient("surface.width", surface.width, tile.width)
    height_ratio = _quotient("surface.height", surface.height, tile.height)

    rows = math.floor(height_ratio)
    columns = math.floor(width_ratio)

    if allow_partial:
        total_tiles = math.ceil(width_ratio) * math.ceil(height_ratio)
    else:
        total_tiles = rows * columns

    return TileUsage(
        rows=rows,
        columns=columns,
        total_tiles=total_tiles,
        leftover_width=_leftover(surface.width, columns, tile.width),
        leftover_height=_leftover(surface.height, rows, tile.height),
    )


def compute_multi_surface_layout(
    surfaces: Iterable[Union[Surface, Mapping]],
    tile: Union[TileUnit, Mapping],
    allow_partial: bool = False,
) -> List[SurfaceLayout]:
    """Lay the same tile over each surface independently, preserving input order."""
    tile = _as_tile(tile)
    layouts = []
    for surface in surfaces:
        surface = _as_surface(surface)
        layouts.append(SurfaceLayout(surface=surface, usage=compute_tile_layout(surface, tile, allow_partial)))
    return layouts
