"""
Pydantic schemas for tile layout and wastage API endpoints.

Bodies mirror what the room visualizer sends: room dimensions in feet from
room analysis, placed tiles with catalog sizes in inches.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from engines.coverage.schemas import (
    CamelModel,
    PlacedTile,
    RoomDimensions,
    Surface,
    SurfaceLayout,
    TileUnit,
    WastagePolicy,
    WastageReport,
)
from engines.coverage.units import LengthUnit


class TileLayoutRequest(CamelModel):
    """Lay one tile over one surface."""

    surface: Surface
    tile: TileUnit
    allow_partial: bool = False
    surface_unit: LengthUnit = Field(default=LengthUnit.METER, description="Unit of the surface and leftovers")
    tile_unit: Optional[LengthUnit] = Field(default=None, description="Unit of the tile; same as surface when omitted")

    class Config:
        json_schema_extra = {
            "example": {
                "surface": {"width": 10, "height": 10},
                "tile": {"width": 3, "height": 3},
                "allowPartial": True,
            }
        }


class MultiSurfaceLayoutRequest(CamelModel):
    """Lay the same tile over several surfaces."""

    surfaces: List[Surface] = Field(..., min_length=1)
    tile: TileUnit
    allow_partial: bool = False
    surface_unit: LengthUnit = LengthUnit.METER
    tile_unit: Optional[LengthUnit] = None


class MultiSurfaceLayoutResponse(CamelModel):
    layouts: List[SurfaceLayout]
    surface_unit: LengthUnit


class WastageRequest(CamelModel):
    """Wastage estimate for every tile placed in the room."""

    room_dimensions: Optional[RoomDimensions] = None
    placed_tiles: List[PlacedTile] = Field(default_factory=list)
    policy: Optional[WastagePolicy] = None

    class Config:
        json_schema_extra = {
            "example": {
                "roomDimensions": {"width": 8, "depth": 6, "height": 8},
                "placedTiles": [
                    {
                        "name": "Carrara Marble 12x12",
                        "dimensions": {"width": 12, "height": 12},
                        "surface": "floor",
                        "price": 4.5,
                    }
                ],
            }
        }


class WastageResponse(CamelModel):
    """Wastage report envelope; fallback is true when the calculator answered instead of the AI."""

    success: bool
    wastage_data: WastageReport
    fallback: bool = False
    error: Optional[str] = None
    timestamp: datetime


class WastagePolicyOption(CamelModel):
    pattern: str
    percentage: float
    description: str


class WastagePoliciesResponse(CamelModel):
    default_percentage: float
    policies: List[WastagePolicyOption]
    surfaces: List[str]
