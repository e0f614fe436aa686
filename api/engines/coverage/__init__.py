"""
Coverage Engine

Pure tile layout and wastage estimation. No I/O, no shared state; safe to
call from any number of request handlers at once.
"""

from .errors import CoverageError, EmptyTileList, InvalidAmount, InvalidDimension, MissingRoomDimensions, UnknownUnit
from .layout import compute_multi_surface_layout, compute_tile_layout
from .schemas import (
    InstallationPattern,
    PlacedTile,
    RoomDimensions,
    Surface,
    SurfaceLayout,
    SurfaceWastage,
    TileDimensions,
    TileUnit,
    TileUsage,
    WastagePolicy,
    WastageReport,
)
from .units import LengthUnit, convert_length, parse_tile_size, square_feet_to_square_inches
from .wastage import compute_wastage_report, resolve_surface_area

__all__ = [
    "CoverageError",
    "EmptyTileList",
    "InvalidAmount",
    "InvalidDimension",
    "MissingRoomDimensions",
    "UnknownUnit",
    "compute_tile_layout",
    "compute_multi_surface_layout",
    "compute_wastage_report",
    "resolve_surface_area",
    "InstallationPattern",
    "PlacedTile",
    "RoomDimensions",
    "Surface",
    "SurfaceLayout",
    "SurfaceWastage",
    "TileDimensions",
    "TileUnit",
    "TileUsage",
    "WastagePolicy",
    "WastageReport",
    "LengthUnit",
    "convert_length",
    "parse_tile_size",
    "square_feet_to_square_inches",
]
