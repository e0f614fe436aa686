"""
Narrative wastage reports from OpenAI with a deterministic fallback.

The AI branch asks a tile-installer persona for a JSON breakdown; the reply is
validated into the same WastageReport model the calculator produces. Whenever
that branch cannot deliver (no API key, API error, empty or unparsable reply)
the calculated report is returned instead, so callers always get one shape.
"""
import json
import re
import time
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Sequence

import openai
from fastapi import Request
from pydantic import BaseModel, ValidationError

from core.config import settings
from engines.coverage import (
    PlacedTile,
    RoomDimensions,
    WastagePolicy,
    WastageReport,
    compute_wastage_report,
)
from engines.coverage.wastage import surface_dimensions
from middleware.logging_middleware import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a professional tile installation expert with 20+ years of experience. "
    "You provide accurate wastage calculations and installation advice."
)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class WastageReportResult(BaseModel):
    """Report plus where it came from"""

    report: WastageReport
    source: Literal["ai", "fallback"]
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


class WastageReportService:
    """Generates wastage reports, preferring the LLM narrative when available"""

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None):
        """
        Args:
            client: An openai.AsyncOpenAI compatible client. Built from settings
                when omitted and an API key is configured.
            model: Chat model name, settings.openai_model by default
        """
        if client is None and settings.openai_api_key:
            client = openai.AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout,
                max_retries=settings.openai_max_retries,
            )
        self.client = client
        self.model = model or settings.openai_model
        self.usage_stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "fallback_responses": 0,
            "total_tokens": 0,
            "last_reset": datetime.now(),
        }

        if self.client is None:
            logger.warning("OpenAI API key not configured - wastage reports will use the calculator only")
        else:
            logger.info("Wastage report service initialized", model=self.model)

    def build_prompt(self, room: RoomDimensions, tiles: Sequence[PlacedTile]) -> str:
        """Describe the room and placed tiles for the installer persona."""
        tile_lines = []
        for index, tile in enumerate(tiles, start=1):
            width = tile.dimensions.width if tile.dimensions and tile.dimensions.width else "Unknown"
            height = tile.dimensions.height if tile.dimensions and tile.dimensions.height else "Unknown"
            size_text = tile.size if tile.dimensions is None and tile.size else f"{width} x {height} inches"
            label = "Floor" if tile.surface == "floor" else f"{tile.surface} Wall"
            span_a, span_b = surface_dimensions(room, tile.surface)
            tile_lines.append(
                f"{index}. {tile.name}\n"
                f"   - Tile Size: {size_text}\n"
                f"   - Surface: {tile.surface} ({label})\n"
                f"   - Coverage: {span_a:g} x {span_b:g} feet"
            )

        return f"""You are a professional tile installation expert. Calculate the exact tile wastage for a room renovation project.

ROOM DIMENSIONS:
- Width: {room.width:g} feet
- Depth: {room.depth:g} feet
- Height: {room.height:g} feet

PLACED TILES:
{chr(10).join(tile_lines)}

CALCULATION REQUIREMENTS:
1. Calculate tiles needed for each surface (floor, walls)
2. Account for standard installation practices:
   - 10% wastage for straight cuts
   - 15% wastage for complex patterns
   - 5% wastage for simple rectangular layouts
3. Consider tile orientation and pattern matching
4. Account for grout lines (typically 1/8" to 1/4")
5. Factor in doorways, windows, and obstacles
6. Include extra tiles for future repairs

Please provide a detailed breakdown in JSON format:
{{
  "totalWastage": {{
    "percentage": number,
    "reasoning": "string"
  }},
  "surfaces": [
    {{
      "surface": "floor|back|left|right|front",
      "dimensions": "width x height",
      "tileSize": "width x height inches",
      "tilesNeeded": number,
      "wastagePercentage": number,
      "wastageReasoning": "string",
      "totalTilesWithWastage": number,
      "costEstimate": number
    }}
  ],
  "recommendations": [
    "string"
  ],
  "installationTips": [
    "string"
  ]
}}

Be precise and professional in your calculations.
"""

    def parse_report(self, content: Optional[str]) -> WastageReport:
        """
        Extract and validate the JSON report from a model reply.

        Raises:
            ValueError: if the reply is empty, holds no JSON object, or the
                object does not match the report schema
        """
        if not content:
            raise ValueError("Empty response from OpenAI")
        match = _JSON_OBJECT.search(content)
        if not match:
            raise ValueError("No JSON found in response")
        data = json.loads(match.group(0))
        return WastageReport.model_validate(data)

    async def _request_narrative(self, messages: List[Dict[str, str]]) -> str:
        start_time = time.time()
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )
        content = response.choices[0].message.content if response.choices else None

        usage = getattr(response, "usage", None)
        if usage is not None and isinstance(getattr(usage, "total_tokens", None), int):
            self.usage_stats["total_tokens"] += usage.total_tokens

        logger.info(
            "OpenAI wastage call finished", model=self.model, response_time_s=round(time.time() - start_time, 2)
        )
        return content

    def _fallback(self, report: WastageReport, error: str) -> WastageReportResult:
        self.usage_stats["fallback_responses"] += 1
        return WastageReportResult(report=report, source="fallback", error=error)

    async def generate_report(
        self,
        room_dimensions: Optional[RoomDimensions],
        placed_tiles: Optional[Sequence[PlacedTile]],
        policy: Optional[WastagePolicy] = None,
    ) -> WastageReportResult:
        """
        Produce a wastage report, from OpenAI when possible.

        Input validation runs first, through the calculator, so invalid
        requests raise CoverageError instead of falling back.
        """
        calculated = compute_wastage_report(room_dimensions, placed_tiles, policy)

        if self.client is None:
            return self._fallback(calculated, "OpenAI API key not configured")

        room = RoomDimensions.model_validate(room_dimensions)
        tiles = [PlacedTile.model_validate(t) for t in placed_tiles]
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self.build_prompt(room, tiles)},
        ]

        self.usage_stats["total_requests"] += 1
        try:
            content = await self._request_narrative(messages)
            report = self.parse_report(content)
        except openai.APIError as e:
            self.usage_stats["failed_requests"] += 1
            logger.error(f"OpenAI API error during wastage calculation: {e}")
            return self._fallback(calculated, f"OpenAI API error: {e}")
        except (ValueError, ValidationError) as e:
            self.usage_stats["failed_requests"] += 1
            logger.warning(f"Failed to parse OpenAI wastage response, using calculated report: {e}")
            return self._fallback(calculated, str(e))
        except Exception as e:
            self.usage_stats["failed_requests"] += 1
            logger.error(f"Wastage narrative failed: {e}", exc_info=True)
            return self._fallback(calculated, str(e))

        self.usage_stats["successful_requests"] += 1
        return WastageReportResult(report=report, source="ai")

    def get_usage_stats(self) -> Dict[str, Any]:
        """Get API usage statistics"""
        return {
            **self.usage_stats,
            "success_rate": (
                self.usage_stats["successful_requests"] / max(self.usage_stats["total_requests"], 1) * 100
            ),
        }

    async def close(self):
        if self.client is not None and hasattr(self.client, "close"):
            await self.client.close()


def get_wastage_report_service(request: Request) -> WastageReportService:
    """FastAPI dependency returning the service created in the app lifespan."""
    return request.app.state.wastage_report_service
