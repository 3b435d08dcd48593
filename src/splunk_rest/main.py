#!/usr/bin/env python3
"""
Splunk REST MCP Server
Exposes the splunk_rest object model as Model Context Protocol tools
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastmcp import FastMCP

from .config import SplunkConfig
from .entity import Entity, EntityCollection
from .errors import SplunkError
from .models import (
    ApplicationRequest,
    ApplicationStateRequest,
    EntitySummary,
    ErrorResponse,
    SliceRequest,
    SliceResponse,
)
from .service import Service

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = FastMCP("Splunk REST MCP Server")

# Global Splunk service instance
service: Optional[Service] = None


def _require_service() -> Service:
    if not service:
        raise RuntimeError("Splunk service not initialized. Please configure connection first.")
    return service


def summarize(entity: Entity) -> EntitySummary:
    return EntitySummary(
        name=entity.name,
        author=entity.author,
        content=entity.content.model_dump(by_alias=True, exclude_none=True),
    )


def slice_response(collection: EntityCollection) -> Dict[str, Any]:
    pagination = collection.pagination
    return SliceResponse(
        offset=pagination.offset,
        items_per_page=pagination.items_per_page,
        total_results=pagination.total_results,
        entities=[summarize(entity) for entity in collection],
        messages=[str(message) for message in collection.messages],
    ).model_dump()


def error_response(error: Exception) -> Dict[str, Any]:
    if isinstance(error, SplunkError):
        return ErrorResponse(
            error=str(error),
            kind=error.kind.value,
            details={"status": error.status, "address": error.address},
        ).model_dump()
    return ErrorResponse(error=str(error)).model_dump()


@mcp.tool()
async def list_applications(request: SliceRequest) -> Dict[str, Any]:
    """
    List one page of installed Splunk applications.

    Args:
        request: Offset, page size and optional filter

    Returns:
        Dictionary containing the applications and pagination metadata
    """
    splunk = _require_service()

    try:
        logger.info(f"Listing applications at offset {request.offset}")
        collection = await splunk.applications.get_slice(
            offset=request.offset,
            count=request.count,
            search=request.search
        )
        return slice_response(collection)

    except Exception as e:
        logger.error(f"Failed to list applications: {str(e)}")
        return error_response(e)


@mcp.tool()
async def get_application(request: ApplicationRequest) -> Dict[str, Any]:
    """
    Get one Splunk application by name.

    Args:
        request: Name of the application

    Returns:
        Dictionary containing the application
    """
    splunk = _require_service()

    try:
        logger.info(f"Getting application {request.name}")
        application = await splunk.applications.get(request.name)
        return {"status": "success", "application": summarize(application).model_dump()}

    except Exception as e:
        logger.error(f"Failed to get application {request.name}: {str(e)}")
        return error_response(e)


@mcp.tool()
async def set_application_disabled(request: ApplicationStateRequest) -> Dict[str, Any]:
    """
    Enable or disable a Splunk application, then fetch its new state.

    Args:
        request: Name of the application and the desired state

    Returns:
        Dictionary containing the application as refetched after the change
    """
    splunk = _require_service()

    try:
        endpoint = splunk.applications.endpoint(request.name)
        if request.disabled:
            logger.info(f"Disabling application {request.name}")
            await endpoint.disable()
        else:
            logger.info(f"Enabling application {request.name}")
            await endpoint.enable()

        application = await endpoint.get()
        return {"status": "success", "application": summarize(application).model_dump()}

    except Exception as e:
        logger.error(f"Failed to change application {request.name}: {str(e)}")
        return error_response(e)


@mcp.tool()
async def list_saved_searches(request: SliceRequest) -> Dict[str, Any]:
    """
    List one page of saved searches.

    Args:
        request: Offset, page size and optional filter

    Returns:
        Dictionary containing the saved searches and pagination metadata
    """
    splunk = _require_service()

    try:
        logger.info(f"Listing saved searches at offset {request.offset}")
        collection = await splunk.saved_searches.get_slice(
            offset=request.offset,
            count=request.count,
            search=request.search
        )
        return slice_response(collection)

    except Exception as e:
        logger.error(f"Failed to list saved searches: {str(e)}")
        return error_response(e)


@mcp.tool()
async def get_server_info() -> Dict[str, Any]:
    """
    Get Splunk server information.

    Returns:
        Dictionary containing server information
    """
    splunk = _require_service()

    try:
        logger.info("Getting Splunk server information")
        info = await splunk.server_info()
        return {"status": "success", "server_info": info.content.model_dump(exclude_none=True)}

    except Exception as e:
        logger.error(f"Failed to get server info: {str(e)}")
        return error_response(e)


async def initialize_service():
    """Initialize the Splunk service with configuration"""
    global service

    try:
        config = SplunkConfig.from_env()
        service = Service(config)
        await service.connect()
        logger.info("Splunk service initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize Splunk service: {str(e)}")
        raise


async def main():
    """Main entry point for the MCP server"""
    try:
        await initialize_service()
        await mcp.run_async()

    except KeyboardInterrupt:
        logger.info("Shutting down MCP server...")
    except Exception as e:
        logger.error(f"Server error: {str(e)}")
        raise
    finally:
        if service:
            await service.close()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
