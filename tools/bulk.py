"""Bulk operation tools over the current selection"""

import logging

from mcp.server.fastmcp import FastMCP

from managers.session import CatalogSession
from tools.helpers import authorization_error

logger = logging.getLogger("MCP_Server")


def register_bulk_tools(mcp: FastMCP, session: CatalogSession):
    """Register bulk operation tools with the MCP server"""

    @mcp.tool()
    async def bulk_delete() -> dict:
        """Delete every selected asset from the remote store.

        All deletions are attempted even if some fail. Returns the ids that
        were deleted and a mapping of failed id to error. The selection is
        cleared afterwards.
        """
        denied = authorization_error(session)
        if denied:
            return denied
        result = await session.pipeline.bulk_delete()
        return result.to_dict()

    @mcp.tool()
    async def delete_asset(asset_id: str) -> dict:
        """Delete a single asset without touching the selection"""
        denied = authorization_error(session)
        if denied:
            return denied
        if asset_id not in session.catalog:
            return {"error": f"Asset {asset_id} not found"}
        result = await session.pipeline.delete_one(asset_id)
        return result.to_dict()

    @mcp.tool()
    async def export_archive() -> dict:
        """Bundle the selected images into one zip file in the download directory.

        Images that cannot be fetched are left out and reported; the archive
        holds the rest. Shared titles get the asset id appended so no entry
        overwrites another.
        """
        denied = authorization_error(session)
        if denied:
            return denied
        try:
            result = await session.pipeline.export_archive()
        except OSError as e:
            logger.exception("Archive export failed")
            return {"error": f"Could not write archive: {e}"}
        return result.to_dict()

    @mcp.tool()
    async def download_assets() -> dict:
        """Save each selected image as its own file in the download directory"""
        denied = authorization_error(session)
        if denied:
            return denied
        result = await session.pipeline.download_raw()
        return result.to_dict()

    @mcp.tool()
    async def share_assets() -> dict:
        """Share all selected images as one batch.

        Succeeds or fails as a whole; fails without contacting the store when
        sharing is not configured.
        """
        denied = authorization_error(session)
        if denied:
            return denied
        result = await session.pipeline.share()
        return result.to_dict()
