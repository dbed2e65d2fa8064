"""Server bootstrap for the route governor MCP service.

Creates the FastMCP instance, builds the governor services once, wires
them into the tools and starts the MCP server (stdio transport).
"""

from mcp.server.fastmcp import FastMCP

from config import ENABLE_DEV_TOOLS, LOG_LEVEL
from core.logging_setup import setup_logging
from server.wiring import Services, build_services

from tools.dev_tools import register as register_dev_tools
from tools.membership_tools import register as register_membership_tools
from tools.routing_tools import register as register_routing_tools

mcp = FastMCP("route-governor-mcp")


def register_tools(app: FastMCP, services: Services, *, dev_tools: bool = ENABLE_DEV_TOOLS) -> None:
    register_routing_tools(app, route_service=services.route_service)
    register_membership_tools(app, gateway=services.gateway, resolver=services.resolver)
    if dev_tools:
        register_dev_tools(app, overrides=services.overrides, resolver=services.resolver)


def main() -> None:
    setup_logging(LOG_LEVEL)
    register_tools(mcp, build_services())
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
