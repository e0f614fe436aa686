"""
Tests for the tile layout and wastage API endpoints.

The router is mounted on a bare FastAPI app the same way main.py mounts it
(prefix "/api"). The wastage report service is swapped through
dependency_overrides, so the OpenAI client is always a mock.
"""
import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from routers.tiles import router
from services.wastage_report_service import WastageReportService, get_wastage_report_service

from middleware import RequestLoggingMiddleware

app = FastAPI()
app.include_router(router, prefix="/api")
app.add_middleware(RequestLoggingMiddleware)


@pytest.fixture
def client():
    """TestClient wrapping the tiles router."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_service():
    """Install a WastageReportService built on the given mock OpenAI client."""

    def _install(openai_client):
        service = WastageReportService(client=openai_client)
        app.dependency_overrides[get_wastage_report_service] = lambda: service
        return service

    return _install


def _post_raw(client, url, body):
    """Post a JSON text as-is; httpx refuses to encode NaN/Infinity itself."""
    return client.post(url, content=body, headers={"Content-Type": "application/json"})


@pytest.fixture
def wastage_body(room_dimensions, floor_tile):
    return {"roomDimensions": room_dimensions, "placedTiles": [floor_tile]}


class TestLayoutEndpoint:

    @pytest.mark.unit
    def test_whole_tile_layout(self, client):
        response = client.post(
            "/api/tiles/layout",
            json={"surface": {"width": 10, "height": 10}, "tile": {"width": 3, "height": 3}},
        )

        assert response.status_code == 200
        assert response.json() == {
            "rows": 3,
            "columns": 3,
            "totalTiles": 9,
            "leftoverWidth": 1,
            "leftoverHeight": 1,
        }

    @pytest.mark.unit
    def test_partial_layout(self, client):
        response = client.post(
            "/api/tiles/layout",
            json={"surface": {"width": 10, "height": 10}, "tile": {"width": 3, "height": 3}, "allowPartial": True},
        )

        assert response.status_code == 200
        assert response.json()["totalTiles"] == 16

    @pytest.mark.unit
    def test_tile_in_another_unit(self, client):
        # 3 x 2.5 m wall with 600 x 500 mm tiles
        response = client.post(
            "/api/tiles/layout",
            json={
                "surface": {"width": 3, "height": 2.5},
                "tile": {"width": 600, "height": 500},
                "surfaceUnit": "m",
                "tileUnit": "mm",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["columns"] == 5
        assert data["rows"] == 5
        assert data["totalTiles"] == 25

    @pytest.mark.unit
    def test_zero_tile_is_bad_request(self, client):
        response = client.post(
            "/api/tiles/layout",
            json={"surface": {"width": 10, "height": 10}, "tile": {"width": 0, "height": 3}},
        )

        assert response.status_code == 400
        assert "tile.width" in response.json()["detail"]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "body",
        [
            '{"surface": {"width": Infinity, "height": 10}, "tile": {"width": 3, "height": 3}}',
            '{"surface": {"width": NaN, "height": 10}, "tile": {"width": 3, "height": 3}}',
            '{"surface": {"width": 10, "height": 10}, "tile": {"width": 3, "height": -Infinity}}',
            '{"surface": {"width": 1e300, "height": 10}, "tile": {"width": 1e-300, "height": 3}}',
        ],
    )
    def test_non_finite_or_overflowing_sides_are_bad_requests(self, client, body):
        response = _post_raw(client, "/api/tiles/layout", body)
        assert response.status_code == 400

    @pytest.mark.unit
    def test_malformed_body_is_unprocessable(self, client):
        response = client.post("/api/tiles/layout", json={"surface": {"width": 10}})
        assert response.status_code == 422

    @pytest.mark.unit
    def test_request_id_header(self, client):
        response = client.post(
            "/api/tiles/layout",
            json={"surface": {"width": 2, "height": 2}, "tile": {"width": 1, "height": 1}},
            headers={"X-Session-ID": "session-1234"},
        )
        assert len(response.headers["X-Request-ID"]) == 8


class TestBatchLayoutEndpoint:

    @pytest.mark.unit
    def test_layouts_keep_request_order(self, client):
        response = client.post(
            "/api/tiles/layout/batch",
            json={
                "surfaces": [{"width": 6, "height": 2.5}, {"width": 10, "height": 10}, {"width": 4, "height": 2.5}],
                "tile": {"width": 2, "height": 2},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["surfaceUnit"] == "m"
        assert [layout["surface"]["width"] for layout in data["layouts"]] == [6, 10, 4]
        assert [layout["usage"]["totalTiles"] for layout in data["layouts"]] == [3, 25, 2]

    @pytest.mark.unit
    def test_empty_surface_list_is_unprocessable(self, client):
        response = client.post("/api/tiles/layout/batch", json={"surfaces": [], "tile": {"width": 2, "height": 2}})
        assert response.status_code == 422

    @pytest.mark.unit
    def test_invalid_surface_is_bad_request(self, client):
        response = client.post(
            "/api/tiles/layout/batch",
            json={"surfaces": [{"width": 6, "height": -1}], "tile": {"width": 2, "height": 2}},
        )
        assert response.status_code == 400


class TestWastageEstimateEndpoint:

    @pytest.mark.unit
    def test_calculated_report(self, client, wastage_body):
        response = client.post("/api/tiles/wastage", json=wastage_body)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["fallback"] is False
        assert "timestamp" in data
        floor = data["wastageData"]["surfaces"][0]
        assert floor["tilesNeeded"] == 48
        assert floor["totalTilesWithWastage"] == 53
        assert data["wastageData"]["summary"]["totalCost"] == 265

    @pytest.mark.unit
    def test_policy_in_body(self, client, wastage_body):
        response = client.post("/api/tiles/wastage", json={**wastage_body, "policy": {"pattern": "complex"}})

        assert response.status_code == 200
        assert response.json()["wastageData"]["surfaces"][0]["totalTilesWithWastage"] == 56

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "body",
        [
            {"placedTiles": [{"name": "Tile", "surface": "floor"}]},
            {"roomDimensions": {"width": 8, "depth": 6, "height": 8}, "placedTiles": []},
            {"roomDimensions": {"width": 8, "depth": 6, "height": 8}},
        ],
    )
    def test_missing_inputs_are_bad_requests(self, client, body):
        response = client.post("/api/tiles/wastage", json=body)

        assert response.status_code == 400
        assert response.json()["detail"] == "Room dimensions and placed tiles are required"

    @pytest.mark.unit
    @pytest.mark.parametrize("side", ["NaN", "Infinity", "1e200"])
    def test_non_finite_room_is_bad_request(self, client, side):
        body = (
            '{"roomDimensions": {"width": %s, "depth": %s, "height": 8}, '
            '"placedTiles": [{"name": "Tile", "surface": "floor"}]}' % (side, side)
        )
        response = _post_raw(client, "/api/tiles/wastage", body)

        assert response.status_code == 400
        assert "room" in response.json()["detail"] or "sq ft" in response.json()["detail"]

    @pytest.mark.unit
    def test_non_finite_price_is_bad_request(self, client):
        body = (
            '{"roomDimensions": {"width": 8, "depth": 6, "height": 8}, '
            '"placedTiles": [{"name": "Tile", "surface": "floor", "price": Infinity}]}'
        )
        response = _post_raw(client, "/api/tiles/wastage", body)

        assert response.status_code == 400
        assert "Tile.price" in response.json()["detail"]

    @pytest.mark.unit
    def test_catalog_size_in_body(self, client, room_dimensions):
        response = client.post(
            "/api/tiles/wastage",
            json={
                "roomDimensions": room_dimensions,
                "placedTiles": [{"name": "Nitco Statuario", "size": "600x600 matte", "surface": "floor"}],
            },
        )

        assert response.status_code == 200
        floor = response.json()["wastageData"]["surfaces"][0]
        assert floor["tileSize"] == "23.622 x 23.622 inches"
        assert floor["tilesNeeded"] == 13

    @pytest.mark.unit
    def test_unreadable_catalog_size_is_bad_request(self, client, room_dimensions):
        response = client.post(
            "/api/tiles/wastage",
            json={"roomDimensions": room_dimensions, "placedTiles": [{"size": "assorted", "surface": "floor"}]},
        )
        assert response.status_code == 400
        assert "assorted" in response.json()["detail"]

    @pytest.mark.unit
    def test_unknown_surface_is_unprocessable(self, client, room_dimensions):
        response = client.post(
            "/api/tiles/wastage",
            json={"roomDimensions": room_dimensions, "placedTiles": [{"name": "Tile", "surface": "ceiling"}]},
        )
        assert response.status_code == 422

    @pytest.mark.unit
    def test_policies_listing(self, client):
        response = client.get("/api/tiles/wastage/policies")

        assert response.status_code == 200
        data = response.json()
        assert data["defaultPercentage"] == 10
        assert {p["pattern"]: p["percentage"] for p in data["policies"]} == {
            "standard": 10,
            "complex": 15,
            "simple": 5,
        }
        assert data["surfaces"] == ["floor", "back", "front", "left", "right"]


class TestCalculateWastageEndpoint:

    @pytest.mark.unit
    def test_ai_report(self, client, use_service, openai_client_factory, wastage_body, ai_report_payload):
        use_service(openai_client_factory(content=json.dumps(ai_report_payload)))

        response = client.post("/api/calculate-wastage", json=wastage_body)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["fallback"] is False
        assert data["wastageData"]["totalWastage"]["percentage"] == 12
        assert data["wastageData"]["summary"]["totalTiles"] == 54

    @pytest.mark.unit
    def test_unparsable_reply_falls_back(self, client, use_service, openai_client_factory, wastage_body):
        use_service(openai_client_factory(content="Sorry, I can't help with that."))

        response = client.post("/api/calculate-wastage", json=wastage_body)

        assert response.status_code == 200
        data = response.json()
        assert data["fallback"] is True
        assert data["error"] == "No JSON found in response"
        assert data["wastageData"]["surfaces"][0]["totalTilesWithWastage"] == 53
        assert data["wastageData"]["recommendations"][0] == "Order 10% extra tiles for cuts and breakage"

    @pytest.mark.unit
    def test_missing_inputs_never_reach_openai(self, client, use_service, openai_client_factory, room_dimensions):
        openai_client = openai_client_factory(content="{}")
        use_service(openai_client)

        response = client.post("/api/calculate-wastage", json={"roomDimensions": room_dimensions, "placedTiles": []})

        assert response.status_code == 400
        openai_client.chat.completions.create.assert_not_called()

    @pytest.mark.unit
    def test_non_finite_room_never_reaches_openai(self, client, use_service, openai_client_factory):
        openai_client = openai_client_factory(content="{}")
        use_service(openai_client)
        body = (
            '{"roomDimensions": {"width": NaN, "depth": 6, "height": 8}, '
            '"placedTiles": [{"name": "Tile", "surface": "floor"}]}'
        )

        response = _post_raw(client, "/api/calculate-wastage", body)

        assert response.status_code == 400
        openai_client.chat.completions.create.assert_not_called()

    @pytest.mark.unit
    def test_service_failure_is_server_error(self, client, wastage_body):
        class BrokenService:
            async def generate_report(self, *args, **kwargs):
                raise RuntimeError("boom")

        app.dependency_overrides[get_wastage_report_service] = lambda: BrokenService()

        response = client.post("/api/calculate-wastage", json=wastage_body)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to calculate wastage"


class TestUsageStatsEndpoint:

    @pytest.mark.unit
    def test_counts_ai_and_fallback_reports(
        self, client, use_service, openai_client_factory, wastage_body, ai_report_payload
    ):
        service = use_service(openai_client_factory(content=json.dumps(ai_report_payload)))

        client.post("/api/calculate-wastage", json=wastage_body)
        response = client.get("/api/tiles/wastage/usage-stats")

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_requests"] == 1
        assert stats["successful_requests"] == 1
        assert stats["fallback_responses"] == 0
        assert stats["total_tokens"] == 321
        assert stats["success_rate"] == 100
        assert "last_reset" in stats
        assert service.usage_stats["total_requests"] == 1

    @pytest.mark.unit
    def test_fresh_service_reports_zero(self, client, use_service, openai_client_factory):
        use_service(openai_client_factory(content="{}"))

        stats = client.get("/api/tiles/wastage/usage-stats").json()

        assert stats["total_requests"] == 0
        assert stats["success_rate"] == 0
