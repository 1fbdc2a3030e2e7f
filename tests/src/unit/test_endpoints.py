"""Unit tests for the endpoint wrappers of SmarthomeClient."""

import httpx
import pytest
from fake_server import BASE_URL, json_route

from smarthome_sdk.auth import QueryToken
from smarthome_sdk.client.rest_client import SmarthomeClient
from smarthome_sdk.errors import DecodeError, SmarthomeStatusError, StatusClass
from smarthome_sdk.homescript.models import DiagnosticLevel, DiagnosticPayload, HomescriptArg
from smarthome_sdk.models import HomescriptData

ROOM = {
    "data": {"id": "kitchen", "name": "Kitchen", "description": "Ground floor"},
    "switches": [
        {"id": "s1", "name": "Lamp", "roomId": "kitchen", "powerOn": True, "watts": 60}
    ],
    "cameras": [
        {"id": "c1", "name": "Door", "url": "http://cam.local", "roomId": "kitchen"}
    ],
}

DEBUG_INFO = {
    "version": "0.5.0",
    "goVersion": "go1.21.0",
    "cpuCores": 4,
    "goroutines": 42,
    "memoryUsage": 128,
    "databaseOnline": True,
    "databaseStats": {"openConnections": 3, "InUse": 1, "Idle": 2},
    "powerJobCount": 1,
    "lastPowerJobErrorCount": 0,
    "powerJobs": [{"id": 1, "switchName": "Lamp", "power": True}],
    "powerJobResults": [{"id": 1, "error": ""}],
    "hardwareNodesCount": 1,
    "hardwareNodesOnline": 1,
    "hardwareNodesEnabled": 1,
    "hardwareNodes": [
        {
            "name": "node1",
            "online": True,
            "enabled": True,
            "url": "http://node1.local",
            "token": "node-token",
        }
    ],
    "homescriptJobCount": 0,
    "time": {"hours": 12, "minutes": 30, "seconds": 5, "unix": 1700000000},
}

LINT_RESULT = {
    "id": "live",
    "success": False,
    "exitCode": 1,
    "output": "",
    "fileContents": {"live": "let x = \n"},
    "errors": [
        {
            "syntaxError": None,
            "diagnosticError": {"kind": 2, "message": "unused variable", "notes": []},
            "runtimeError": None,
            "span": {
                "start": {"line": 1, "column": 5, "index": 4},
                "end": {"line": 1, "column": 5, "index": 4},
                "filename": "live",
            },
        }
    ],
}


@pytest.fixture
async def client(server):
    """A ready client using query token authentication."""
    client = await SmarthomeClient.connect(
        BASE_URL, QueryToken("abc"), transport=server.transport
    )
    server.requests.clear()
    yield client
    await client.close()


class TestRooms:
    """Tests for rooms and cameras."""

    @pytest.mark.asyncio
    async def test_personal_rooms(self, server, client):
        server.route("GET", "/api/room/list/personal", json_route(200, [ROOM]))

        rooms = await client.personal_rooms()

        assert len(rooms) == 1
        assert rooms[0].data.name == "Kitchen"
        assert rooms[0].switches[0].power_on is True
        assert rooms[0].cameras[0].room_id == "kitchen"
        assert dict(server.requests[0].url.params) == {"token": "abc"}

    @pytest.mark.asyncio
    async def test_camera_feed_returns_raw_bytes(self, server, client):
        server.route(
            "GET",
            "/api/camera/feed/c1",
            lambda request: httpx.Response(200, content=b"\x89PNG"),
        )

        assert await client.camera_feed("c1") == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_camera_id_is_a_single_path_segment(self, server, client):
        server.route(
            "GET",
            "/api/camera/feed/x?token=evil",
            lambda request: httpx.Response(200, content=b"img"),
        )

        assert await client.camera_feed("x?token=evil") == b"img"

        request = server.requests[0]
        assert request.url.raw_path.startswith(b"/api/camera/feed/x%3Ftoken%3Devil?")
        assert dict(request.url.params) == {"token": "abc"}

    @pytest.mark.asyncio
    async def test_camera_feed_forbidden(self, server, client):
        server.route("GET", "/api/camera/feed/c1", json_route(403))

        with pytest.raises(SmarthomeStatusError) as exc_info:
            await client.camera_feed("c1")

        assert exc_info.value.classification == StatusClass.FORBIDDEN


class TestPower:
    """Tests for power switches and usage."""

    @pytest.mark.asyncio
    async def test_set_power_sends_camel_case_body(self, server, client):
        server.route("POST", "/api/power/set", json_route(200, {}))

        await client.set_power("s1", True)

        assert server.body(server.requests[0]) == {"switch": "s1", "powerOn": True}

    @pytest.mark.asyncio
    async def test_set_power_conflict(self, server, client):
        server.route("POST", "/api/power/set", json_route(409, {"message": "busy"}))

        with pytest.raises(SmarthomeStatusError) as exc_info:
            await client.set_power("s1", False)

        assert exc_info.value.status_code == 409
        assert exc_info.value.classification == StatusClass.CONFLICT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("fetch_all", "path"),
        [(True, "/api/power/usage/all"), (False, "/api/power/usage/day")],
    )
    async def test_power_usage_paths(self, server, client, fetch_all, path):
        point = {
            "id": 1,
            "time": 1700000000000,
            "on": {"switchCount": 2, "watts": 120, "percent": 66.6},
            "off": {"switchCount": 1, "watts": 60, "percent": 33.3},
        }
        server.route("GET", path, json_route(200, [point]))

        usage = await client.power_usage(fetch_all)

        assert usage[0].on.switch_count == 2
        assert usage[0].off.percent == 33.3
        assert server.paths() == [path]


class TestSystem:
    """Tests for export and debug endpoints."""

    @pytest.mark.asyncio
    async def test_export_config_returns_text(self, server, client):
        server.route(
            "GET",
            "/api/system/config/export",
            lambda request: httpx.Response(200, text='{"rooms": []}'),
        )

        assert await client.export_config() == '{"rooms": []}'

    @pytest.mark.asyncio
    async def test_debug_info(self, server, client):
        server.route("GET", "/api/debug", json_route(200, DEBUG_INFO))

        info = await client.debug_info()

        assert info.server_version == "0.5.0"
        assert info.database_stats.in_use == 1
        assert info.power_job_with_error_count == 0
        assert info.hardware_nodes[0].name == "node1"
        assert "node-token" not in repr(info)

    @pytest.mark.asyncio
    async def test_debug_info_malformed(self, server, client):
        server.route("GET", "/api/debug", json_route(200, {"version": "0.5.0"}))

        with pytest.raises(DecodeError):
            await client.debug_info()


class TestHomescript:
    """Tests for Homescript management and execution."""

    @pytest.mark.asyncio
    async def test_create_homescript(self, server, client):
        server.route("POST", "/api/homescript/add", json_route(200, {}))

        await client.create_homescript(HomescriptData(id="lights", name="Lights"))

        body = server.body(server.requests[0])
        assert body["id"] == "lights"
        assert body["quickActionsEnabled"] is False
        assert body["mdIcon"] == ""

    @pytest.mark.asyncio
    async def test_delete_homescript(self, server, client):
        server.route("DELETE", "/api/homescript/delete", json_route(200, {}))

        await client.delete_homescript("lights")

        assert server.requests[0].method == "DELETE"
        assert server.body(server.requests[0]) == {"id": "lights"}

    @pytest.mark.asyncio
    async def test_delete_missing_homescript(self, server, client):
        server.route("DELETE", "/api/homescript/delete", json_route(422, {}))

        with pytest.raises(SmarthomeStatusError) as exc_info:
            await client.delete_homescript("missing")

        assert exc_info.value.status_code == 422
        assert exc_info.value.classification == StatusClass.UNEXPECTED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("lint", "path"),
        [(False, "/api/homescript/run/live"), (True, "/api/homescript/lint/live")],
    )
    async def test_exec_code_paths(self, server, client, lint, path):
        server.route(
            "POST",
            path,
            json_route(
                200,
                {"id": "live", "success": True, "output": "hi\n", "fileContents": {}, "errors": []},
            ),
        )

        result = await client.exec_homescript_code(
            "println('hi')", [HomescriptArg(key="room", value="kitchen")], lint=lint
        )

        assert result.success is True
        assert result.output == "hi\n"
        assert server.body(server.requests[0]) == {
            "code": "println('hi')",
            "args": [{"key": "room", "value": "kitchen"}],
        }

    @pytest.mark.asyncio
    async def test_failed_run_is_a_result_not_an_error(self, server, client):
        """The server answers failing scripts with status 500 and a result body."""
        server.route("POST", "/api/homescript/lint/live", json_route(500, LINT_RESULT))

        result = await client.exec_homescript_code("let x = \n", lint=True)

        assert result.success is False
        assert result.exit_code == 1
        payload = result.errors[0].payload
        assert isinstance(payload, DiagnosticPayload)
        assert payload.level == DiagnosticLevel.WARNING
        assert result.render_errors()[0].startswith("Warning at live:1:5")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("lint", "path"),
        [(False, "/api/homescript/run"), (True, "/api/homescript/lint")],
    )
    async def test_exec_by_id(self, server, client, lint, path):
        server.route("POST", path, json_route(200, {"success": True, "errors": []}))

        result = await client.exec_homescript("lights", lint=lint)

        assert result.success is True
        assert server.body(server.requests[0]) == {"id": "lights", "args": []}

    @pytest.mark.asyncio
    async def test_exec_unauthorized(self, server, client):
        server.route("POST", "/api/homescript/run", json_route(401, {}))

        with pytest.raises(SmarthomeStatusError) as exc_info:
            await client.exec_homescript("lights")

        assert exc_info.value.classification == StatusClass.INVALID_CREDENTIALS
