"""
Pytest configuration and fixtures for Reno Visualizer API tests.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def room_dimensions():
    """Small bathroom as returned by room analysis (feet)."""
    return {"width": 8, "depth": 6, "height": 8}


@pytest.fixture
def floor_tile():
    """12x12 inch floor tile with no catalog price."""
    return {
        "name": "Carrara Marble 12x12",
        "dimensions": {"width": 12, "height": 12},
        "surface": "floor",
    }


@pytest.fixture
def placed_tiles(floor_tile):
    """Floor plus two walls, as placed in the 3D viewer."""
    return [
        floor_tile,
        {
            "name": "Subway White 3x6",
            "dimensions": {"width": 3, "height": 6},
            "surface": "back",
            "price": 0.75,
        },
        {
            "name": "Slate Grey 12x24",
            "dimensions": {"width": 12, "height": 24},
            "surface": "left",
            "price": 6.0,
        },
    ]


@pytest.fixture
def ai_report_payload():
    """Report shaped the way the installer prompt asks for it."""
    return {
        "totalWastage": {"percentage": 12, "reasoning": "Diagonal floor layout needs extra cuts"},
        "surfaces": [
            {
                "surface": "floor",
                "dimensions": "8 x 6",
                "tileSize": "12 x 12 inches",
                "tilesNeeded": 48,
                "wastagePercentage": 12,
                "wastageReasoning": "Diagonal cuts along every wall",
                "totalTilesWithWastage": 54,
                "costEstimate": 270,
            }
        ],
        "recommendations": ["Buy all tiles from the same batch"],
        "installationTips": ["Dry-lay the first two rows"],
    }


def make_openai_client(content=None, side_effect=None):
    """Mock AsyncOpenAI client whose chat completion returns `content`."""
    client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(total_tokens=321)
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    client.close = AsyncMock()
    return client


@pytest.fixture
def openai_client_factory():
    """Build mock OpenAI clients for a given reply or exception."""
    return make_openai_client
