import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from mcp.server.fastmcp import FastMCP

from managers.session import CatalogSession
from managers.settings_manager import SettingsManager
from tools.bulk import register_bulk_tools
from tools.catalog import register_catalog_tools
from tools.configuration import register_configuration_tools
from tools.edit import register_edit_tools
from tools.selection import register_selection_tools
from tools.upload import register_upload_tools

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("MCP_Server")

settings_manager = SettingsManager()
# An unconfigured store leaves the gate closed; configuration tools still work
catalog_session = CatalogSession.from_settings(settings_manager)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[CatalogSession]:
    """Load the catalog once at session start"""
    logger.info("Starting catalog server lifecycle...")
    try:
        gate = catalog_session.gate
        if gate.is_authorized():
            report = await catalog_session.load()
            if report.error:
                logger.warning(f"Catalog started empty: {report.error}")
        else:
            logger.warning(f"{gate.reason}; operators must sign in at {gate.login_url}")
        yield catalog_session
    finally:
        logger.info("Shutting down catalog server")


mcp = FastMCP("Image_Catalog_MCP_Server", lifespan=app_lifespan)

register_catalog_tools(mcp, catalog_session)
register_selection_tools(mcp, catalog_session)
register_bulk_tools(mcp, catalog_session)
register_edit_tools(mcp, catalog_session)
register_upload_tools(mcp, catalog_session)
register_configuration_tools(mcp, settings_manager, on_change=catalog_session.apply_settings)

if __name__ == "__main__":
    mcp.run(transport="streamable-http")
