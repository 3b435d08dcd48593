"""
Tests for the MCP tool functions
"""

from unittest.mock import AsyncMock

import aiohttp
import pytest

from splunk_rest import main
from splunk_rest.models import ApplicationRequest, ApplicationStateRequest, SliceRequest

from conftest import app_path, atom_entry, atom_feed, response_document

APPS = "/servicesNS/nobody/system/apps/local"


def call(tool):
    """The coroutine function behind a registered MCP tool"""
    return getattr(tool, "fn", tool)


@pytest.fixture
def installed(service, monkeypatch):
    monkeypatch.setattr(main, "service", service)
    return service


class TestTools:
    """Test cases for the MCP tools"""

    @pytest.mark.asyncio
    async def test_list_applications(self, installed, session):
        session.add("GET", APPS, atom_feed(
            [atom_entry("search", app_path("search"), {"disabled": "0", "label": "Search"})],
            total=12, per_page=1, offset=3, messages=[("INFO", "filtered")]))

        result = await call(main.list_applications)(SliceRequest(offset=3, count=1))

        assert result["status"] == "success"
        assert result["offset"] == 3
        assert result["total_results"] == 12
        assert result["entities"][0]["name"] == "search"
        assert result["entities"][0]["content"]["label"] == "Search"
        assert result["messages"] == ["INFO: filtered"]
        assert "search" not in dict(session.calls[0][2]["params"])

    @pytest.mark.asyncio
    async def test_get_application_not_found(self, installed, session):
        session.add("GET", f"{APPS}/missing",
                    response_document([("ERROR", "Application does not exist: missing")]), status=404)

        result = await call(main.get_application)(ApplicationRequest(name="missing"))

        assert result["status"] == "error"
        assert result["kind"] == "resource_not_found"
        assert result["details"]["status"] == 404
        assert "Application does not exist" in result["error"]

    @pytest.mark.asyncio
    async def test_set_application_disabled_refetches(self, installed, session):
        session.add("POST", f"{APPS}/twitter2/disable", "")
        session.add("GET", f"{APPS}/twitter2", atom_feed([atom_entry("twitter2", app_path("twitter2"), {"disabled": "1"})]))

        result = await call(main.set_application_disabled)(ApplicationStateRequest(name="twitter2", disabled=True))

        assert result["application"]["content"]["disabled"] is True
        assert [c[:2] for c in session.calls] == [
            ("POST", f"{APPS}/twitter2/disable"),
            ("GET", f"{APPS}/twitter2"),
        ]

    @pytest.mark.asyncio
    async def test_get_server_info(self, installed, session):
        session.add("GET", "/servicesNS/nobody/system/server/info", atom_feed([
            atom_entry("server-info", "/services/server/info/server-info", {"version": "9.0.0"}),
        ]))

        result = await call(main.get_server_info)()

        assert result["status"] == "success"
        assert result["server_info"]["version"] == "9.0.0"

    @pytest.mark.asyncio
    async def test_service_not_initialized(self, monkeypatch):
        monkeypatch.setattr(main, "service", None)
        with pytest.raises(RuntimeError, match="not initialized"):
            await call(main.get_server_info)()

    def test_application_name_is_required(self):
        with pytest.raises(ValueError):
            ApplicationRequest(name="  ")

    @pytest.mark.asyncio
    async def test_transport_error_becomes_error_response(self, installed, session):
        session.request = AsyncMock(side_effect=aiohttp.ClientConnectionError("Connection refused"))

        result = await call(main.list_saved_searches)(SliceRequest())

        assert result["status"] == "error"
        assert result["kind"] is None
        assert "Connection refused" in result["error"]
