"""
Tiles Router

Tile layout and wastage/quote endpoints for the room visualizer. The layout
endpoints answer "how do these tiles lay out on this wall"; the wastage
endpoints price every tile placed in the room.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from engines.coverage import (
    CoverageError,
    EmptyTileList,
    MissingRoomDimensions,
    TileUsage,
    compute_multi_surface_layout,
    compute_tile_layout,
    compute_wastage_report,
)
from engines.coverage.schemas import SURFACE_TAGS
from engines.coverage.units import convert_tile
from engines.coverage.wastage import PATTERN_REASONING, PATTERN_WASTAGE_PERCENT
from middleware.logging_middleware import get_logger
from schemas.tiles import (
    MultiSurfaceLayoutRequest,
    MultiSurfaceLayoutResponse,
    TileLayoutRequest,
    WastagePoliciesResponse,
    WastagePolicyOption,
    WastageRequest,
    WastageResponse,
)
from services.wastage_report_service import WastageReportService, get_wastage_report_service
from core.config import settings

logger = get_logger(__name__)

router = APIRouter()


def _bad_request(error: CoverageError) -> HTTPException:
    if isinstance(error, (MissingRoomDimensions, EmptyTileList)):
        return HTTPException(status_code=400, detail="Room dimensions and placed tiles are required")
    return HTTPException(status_code=400, detail=str(error))


@router.post("/tiles/layout", response_model=TileUsage)
async def calculate_tile_layout(request: TileLayoutRequest):
    """
    Lay one tile over one surface.

    The tile is converted into the surface unit first; leftovers come back in
    the surface unit.
    """
    try:
        tile = convert_tile(request.tile, request.tile_unit or request.surface_unit, request.surface_unit)
        return compute_tile_layout(request.surface, tile, request.allow_partial)
    except CoverageError as e:
        raise _bad_request(e)


@router.post("/tiles/layout/batch", response_model=MultiSurfaceLayoutResponse)
async def calculate_multi_surface_layout(request: MultiSurfaceLayoutRequest):
    """Lay the same tile over several surfaces; layouts keep the request order."""
    try:
        tile = convert_tile(request.tile, request.tile_unit or request.surface_unit, request.surface_unit)
        layouts = compute_multi_surface_layout(request.surfaces, tile, request.allow_partial)
    except CoverageError as e:
        raise _bad_request(e)

    return MultiSurfaceLayoutResponse(layouts=layouts, surface_unit=request.surface_unit)


@router.get("/tiles/wastage/policies", response_model=WastagePoliciesResponse)
async def get_wastage_policies():
    """List the wastage allowances the calculator understands."""
    return WastagePoliciesResponse(
        default_percentage=settings.default_wastage_percent,
        policies=[
            WastagePolicyOption(
                pattern=pattern.value,
                percentage=percent,
                description=PATTERN_REASONING[pattern],
            )
            for pattern, percent in PATTERN_WASTAGE_PERCENT.items()
        ],
        surfaces=list(SURFACE_TAGS),
    )


@router.post("/tiles/wastage", response_model=WastageResponse)
async def calculate_wastage_estimate(request: WastageRequest):
    """Deterministic wastage report, no AI involved."""
    try:
        report = compute_wastage_report(request.room_dimensions, request.placed_tiles, request.policy)
    except CoverageError as e:
        logger.warning(f"Rejected wastage estimate: {e}")
        raise _bad_request(e)

    return WastageResponse(success=True, wastage_data=report, fallback=False, timestamp=datetime.utcnow())


@router.post("/calculate-wastage", response_model=WastageResponse)
async def calculate_wastage(
    request: WastageRequest,
    service: WastageReportService = Depends(get_wastage_report_service),
):
    """
    Wastage report written by the installer assistant.

    Falls back to the calculated report when the AI call fails or returns
    something unparsable; `fallback` tells the UI which one it got.
    """
    logger.info(
        "Calculating wastage",
        placed_tiles=len(request.placed_tiles),
        room=request.room_dimensions.model_dump() if request.room_dimensions else None,
    )
    try:
        result = await service.generate_report(request.room_dimensions, request.placed_tiles, request.policy)
    except CoverageError as e:
        logger.warning(f"Rejected wastage request: {e}")
        raise _bad_request(e)
    except Exception as e:
        logger.error(f"Wastage calculation error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to calculate wastage")

    return WastageResponse(
        success=True,
        wastage_data=result.report,
        fallback=result.is_fallback,
        error=result.error,
        timestamp=datetime.utcnow(),
    )


@router.get("/tiles/wastage/usage-stats")
async def get_wastage_usage_stats(service: WastageReportService = Depends(get_wastage_report_service)):
    """OpenAI usage for wastage reports since startup"""
    return service.get_usage_stats()
