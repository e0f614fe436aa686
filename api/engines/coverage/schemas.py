"""
Pydantic schemas for the Coverage Engine

Field names are snake_case in Python and camelCase on the wire
(totalTiles, leftoverWidth, tilesNeeded, ...), matching what the
visualizer frontend renders.
"""
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

# Surfaces a tile can be placed on. Walls are named from the viewer's position.
SurfaceTag = Literal["floor", "back", "front", "left", "right"]

SURFACE_TAGS = ("floor", "back", "front", "left", "right")


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"


# ==================== Geometry ====================


class Surface(CamelModel):
    """One plane to cover (a floor or a single wall)"""

    width: float
    height: float


class TileUnit(CamelModel):
    """Footprint of one physical tile or panel"""

    width: float
    height: float


class TileUsage(CamelModel):
    """Layout of one tile over one surface"""

    rows: int = Field(ge=0)
    columns: int = Field(ge=0)
    total_tiles: int = Field(ge=0)
    leftover_width: float = Field(ge=0)
    leftover_height: float = Field(ge=0)


class SurfaceLayout(CamelModel):
    """A surface paired with its computed usage"""

    surface: Surface
    usage: TileUsage


# ==================== Wastage inputs ====================


class RoomDimensions(CamelModel):
    """Room box in feet, as inferred by room analysis"""

    width: float = Field(description="Wall-to-wall width in feet")
    depth: float = Field(description="Front-to-back depth in feet")
    height: float = Field(description="Floor-to-ceiling height in feet")


class TileDimensions(CamelModel):
    """Catalog tile size in inches; either side may be unknown"""

    width: Optional[float] = None
    height: Optional[float] = None


class InstallationPattern(str, Enum):
    """Installation complexity, each with its own wastage allowance"""

    STANDARD = "standard"  # straight cuts
    COMPLEX = "complex"  # herringbone, diagonal, pattern matching
    SIMPLE = "simple"  # simple rectangular layouts


class PlacedTile(CamelModel):
    """A catalog product placed on one surface of the room"""

    name: str = "Tile"
    dimensions: Optional[TileDimensions] = None
    size: Optional[str] = Field(
        default=None, description="Catalog size such as '600x600 mm', used for sides missing from dimensions"
    )
    surface: SurfaceTag
    price: Optional[float] = Field(default=None, description="Price per tile, finite and not negative")
    pattern: Optional[InstallationPattern] = Field(
        default=None, description="Overrides the report-level policy for this surface"
    )


class WastagePolicy(CamelModel):
    """
    Wastage allowance applied on top of the area-based tile count.

    Without a custom percentage the pattern's standard allowance applies
    (standard 10%, complex 15%, simple 5%).
    """

    pattern: InstallationPattern = InstallationPattern.STANDARD
    percentage: Optional[float] = Field(default=None, description="Custom allowance from 0 to 100")


# ==================== Wastage report ====================


class TotalWastage(CamelModel):
    percentage: float
    reasoning: str


class SurfaceWastage(CamelModel):
    """Per-surface breakdown line of a wastage report"""

    surface: str
    surface_name: Optional[str] = None
    dimensions: str
    tile_size: str
    area_sq_ft: Optional[float] = None
    tiles_needed: int = Field(ge=0)
    wastage_percentage: float = Field(ge=0)
    wastage_reasoning: str = ""
    total_tiles_with_wastage: int = Field(ge=0)
    unit_cost: Optional[float] = None
    cost_estimate: float = Field(ge=0)


class WastageSummary(CamelModel):
    tiles_needed: int
    total_tiles: int
    total_cost: float
    total_wastage_percentage: float


class WastageReport(CamelModel):
    """Surface-by-surface breakdown plus totals, rendered by the quote panel"""

    total_wastage: TotalWastage
    surfaces: List[SurfaceWastage]
    recommendations: List[str] = Field(default_factory=list)
    installation_tips: List[str] = Field(default_factory=list)
    summary: Optional[WastageSummary] = None

    @model_validator(mode="after")
    def fill_summary(self) -> "WastageReport":
        # Narrative reports often omit totals; derive them from the surfaces
        if self.summary is None:
            self.summary = WastageSummary(
                tiles_needed=sum(s.tiles_needed for s in self.surfaces),
                total_tiles=sum(s.total_tiles_with_wastage for s in self.surfaces),
                total_cost=round(sum(s.cost_estimate for s in self.surfaces), 2),
                total_wastage_percentage=self.total_wastage.percentage,
            )
        return self
