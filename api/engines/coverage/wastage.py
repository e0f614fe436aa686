"""
Area-based wastage and cost estimation.

This module turns the tiles placed in the visualizer into a quote: the area of
each target surface divided by the tile area, plus a wastage allowance, priced
per tile. It deliberately does not use the grid layout from layout.py since a
placed tile carries no orientation or starting corner; counts shown here can
differ from the layout endpoint for the same surface.
"""
import math
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from core.config import settings
from .errors import EmptyTileList, InvalidAmount, InvalidDimension, MissingRoomDimensions
from .layout import QUOTIENT_PRECISION, validate_rect
from .schemas import (
    InstallationPattern,
    PlacedTile,
    RoomDimensions,
    SurfaceWastage,
    TotalWastage,
    WastagePolicy,
    WastageReport,
    WastageSummary,
)
from .units import parse_tile_size, square_feet_to_square_inches

# Wastage allowance per installation pattern (percent)
PATTERN_WASTAGE_PERCENT: Dict[InstallationPattern, float] = {
    InstallationPattern.STANDARD: 10.0,
    InstallationPattern.COMPLEX: 15.0,
    InstallationPattern.SIMPLE: 5.0,
}

PATTERN_REASONING: Dict[InstallationPattern, str] = {
    InstallationPattern.STANDARD: "Standard 10% wastage for cuts and breakage",
    InstallationPattern.COMPLEX: "15% wastage for complex patterns and pattern matching",
    InstallationPattern.SIMPLE: "5% wastage for a simple rectangular layout",
}

# Static guidance shipped with every calculated report
RECOMMENDATIONS: List[str] = [
    "Order 10% extra tiles for cuts and breakage",
    "Consider tile pattern and orientation for optimal usage",
    "Account for doorways and obstacles in your calculations",
]

INSTALLATION_TIPS: List[str] = [
    "Start from the center and work outward for best results",
    "Use tile spacers for consistent grout lines",
    "Keep extra tiles for future repairs",
]


def surface_dimensions(room: RoomDimensions, surface: str) -> Tuple[float, float]:
    """Return the (width, height) in feet of a room surface."""
    if surface == "floor":
        return room.width, room.depth
    if surface in ("back", "front"):
        return room.width, room.height
    if surface in ("left", "right"):
        return room.depth, room.height
    raise ValueError(f"Unknown surface '{surface}'")


def resolve_surface_area(room: RoomDimensions, surface: str) -> float:
    """Area in square feet of the floor or one wall."""
    width, height = surface_dimensions(room, surface)
    return width * height


def surface_display_name(surface: str) -> str:
    return "Floor" if surface == "floor" else f"{surface.capitalize()} Wall"


def wastage_percent_for(policy: Optional[WastagePolicy], pattern: Optional[InstallationPattern] = None) -> float:
    """
    Resolve the wastage percentage for one placed tile.

    A per-tile pattern wins over the report policy; a custom policy
    percentage applies only when the tile has no pattern of its own.
    """
    if pattern is not None:
        return PATTERN_WASTAGE_PERCENT[pattern]
    if policy is None:
        return settings.default_wastage_percent
    if policy.percentage is not None:
        return policy.percentage
    return PATTERN_WASTAGE_PERCENT[policy.pattern]


def _reasoning_for(percent: float, policy: Optional[WastagePolicy], pattern: Optional[InstallationPattern]) -> str:
    chosen = pattern or (policy.pattern if policy else InstallationPattern.STANDARD)
    if PATTERN_WASTAGE_PERCENT[chosen] == percent:
        return PATTERN_REASONING[chosen]
    return f"Custom {percent:g}% wastage for cuts and breakage"


def apply_wastage(tiles_needed: int, wastage_percent: float) -> int:
    total = round(tiles_needed * (1 + wastage_percent / 100), QUOTIENT_PRECISION)
    if not math.isfinite(total):
        raise InvalidDimension("tilesNeeded", tiles_needed, f"{tiles_needed} tiles is too many to add wastage to")
    return math.ceil(total)


def _check_amount(field: str, value: Optional[float], upper: float = math.inf) -> None:
    if value is not None and not (math.isfinite(value) and 0 <= value <= upper):
        raise InvalidAmount(field, value)


def _tile_size(tile: PlacedTile) -> Tuple[float, float]:
    # Explicit sides win, then the catalog size string, then the default side
    catalog = parse_tile_size(tile.size) if tile.size else None
    width = tile.dimensions.width if tile.dimensions else None
    height = tile.dimensions.height if tile.dimensions else None
    if width is None:
        width = catalog.width if catalog else settings.default_tile_size_in
    if height is None:
        height = catalog.height if catalog else settings.default_tile_size_in
    validate_rect(f"{tile.name}.dimensions", width, height)
    return width, height


def estimate_surface(
    room: RoomDimensions,
    tile: PlacedTile,
    policy: Optional[WastagePolicy] = None,
    unit_cost: Optional[float] = None,
) -> SurfaceWastage:
    """Tile count, wastage and cost for one placed tile."""
    area_sq_ft = resolve_surface_area(room, tile.surface)
    tile_width, tile_height = _tile_size(tile)

    tile_area = tile_width * tile_height
    coverage = round(square_feet_to_square_inches(area_sq_ft) / tile_area, QUOTIENT_PRECISION) if tile_area else math.inf
    if not math.isfinite(coverage):
        raise InvalidDimension(
            f"{tile.name}.dimensions",
            (tile_width, tile_height),
            f"{tile_width:g} x {tile_height:g} inch tiles cannot be counted over {area_sq_ft:g} sq ft",
        )
    tiles_needed = math.ceil(coverage)
    percent = wastage_percent_for(policy, tile.pattern)
    with_wastage = apply_wastage(tiles_needed, percent)

    if tile.price is not None:
        cost_per_tile = tile.price
    elif unit_cost is not None:
        cost_per_tile = unit_cost
    else:
        cost_per_tile = settings.fallback_tile_unit_cost
    cost = round(with_wastage * cost_per_tile, 2)
    if not math.isfinite(cost):
        raise InvalidAmount(
            f"{tile.name}.price", cost_per_tile, f"{with_wastage} tiles at {cost_per_tile:g} each overflows the estimate"
        )

    span_a, span_b = surface_dimensions(room, tile.surface)
    return SurfaceWastage(
        surface=tile.surface,
        surface_name=surface_display_name(tile.surface),
        dimensions=f"{span_a:g} x {span_b:g} ft",
        tile_size=f"{tile_width:g} x {tile_height:g} inches",
        area_sq_ft=area_sq_ft,
        tiles_needed=tiles_needed,
        wastage_percentage=percent,
        wastage_reasoning=_reasoning_for(percent, policy, tile.pattern),
        total_tiles_with_wastage=with_wastage,
        unit_cost=cost_per_tile,
        cost_estimate=cost,
    )


def _overall_percent(surfaces: List[SurfaceWastage]) -> float:
    percents = {s.wastage_percentage for s in surfaces}
    if len(percents) == 1:
        return percents.pop()
    # Mixed patterns: weight each surface by its base tile count
    needed = sum(s.tiles_needed for s in surfaces)
    if not needed:
        return max(percents)
    return round(sum(s.wastage_percentage * s.tiles_needed for s in surfaces) / needed, 1)


def compute_wastage_report(
    room_dimensions: Optional[Union[RoomDimensions, Mapping]],
    placed_tiles: Optional[Sequence[Union[PlacedTile, Mapping]]],
    policy: Optional[WastagePolicy] = None,
    unit_cost: Optional[float] = None,
) -> WastageReport:
    """
    Build the deterministic wastage report for every placed tile.

    Args:
        room_dimensions: Room box in feet
        placed_tiles: Tiles placed in the visualizer, one surface each
        policy: Wastage policy; flat 10% when omitted
        unit_cost: Price per tile for items without their own price;
            settings.fallback_tile_unit_cost when omitted

    Raises:
        MissingRoomDimensions: if room_dimensions is None
        EmptyTileList: if no tiles are placed
        InvalidDimension: if a room side or tile side is zero, negative or not
            finite, a catalog size string is unreadable, or a count overflows
        InvalidAmount: if a price, unit cost or policy percentage is negative,
            not finite, or (for the percentage) above 100
    """
    if room_dimensions is None:
        raise MissingRoomDimensions()
    if not placed_tiles:
        raise EmptyTileList()

    room = room_dimensions if isinstance(room_dimensions, RoomDimensions) else RoomDimensions.model_validate(room_dimensions)
    placed_tiles = [t if isinstance(t, PlacedTile) else PlacedTile.model_validate(t) for t in placed_tiles]
    for side in ("width", "depth", "height"):
        value = getattr(room, side)
        if not math.isfinite(value) or value <= 0:
            raise InvalidDimension(f"room.{side}", value)
    if policy is not None:
        _check_amount("policy.percentage", policy.percentage, upper=100)
    _check_amount("unitCost", unit_cost)
    for tile in placed_tiles:
        _check_amount(f"{tile.name}.price", tile.price)

    surfaces = [estimate_surface(room, tile, policy, unit_cost) for tile in placed_tiles]
    overall = _overall_percent(surfaces)

    if len({s.wastage_percentage for s in surfaces}) == 1:
        reasoning = f"Standard wastage calculation with {overall:g}% buffer for cuts and breakage"
    else:
        reasoning = f"Blended {overall:g}% buffer across surfaces with different installation patterns"

    return WastageReport(
        total_wastage=TotalWastage(percentage=overall, reasoning=reasoning),
        surfaces=surfaces,
        recommendations=list(RECOMMENDATIONS),
        installation_tips=list(INSTALLATION_TIPS),
        summary=WastageSummary(
            tiles_needed=sum(s.tiles_needed for s in surfaces),
            total_tiles=sum(s.total_tiles_with_wastage for s in surfaces),
            total_cost=round(sum(s.cost_estimate for s in surfaces), 2),
            total_wastage_percentage=overall,
        ),
    )
