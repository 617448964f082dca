"""Upload tools"""

import logging
from typing import List

from mcp.server.fastmcp import FastMCP

from managers.session import CatalogSession
from managers.upload_ingestor import UploadFile
from tools.helpers import authorization_error

logger = logging.getLogger("MCP_Server")


def register_upload_tools(mcp: FastMCP, session: CatalogSession):
    """Register upload tools with the MCP server"""

    @mcp.tool()
    def list_folders() -> dict:
        """List the folders new uploads can be filed under"""
        denied = authorization_error(session)
        if denied:
            return denied
        folders = session.ingestor.folders
        return {"folders": folders, "default": folders[0] if folders else None}

    @mcp.tool()
    async def upload_images(
        paths: List[str],
        title: str,
        tags: str = "",
        category: str = "",
        folder: str = "",
    ) -> dict:
        """Upload local images and/or zip archives of images to the catalog.

        Zip archives are expanded and only jpg, jpeg, png, webp and gif entries
        are uploaded. The same title, tags, category and folder are applied to
        every image. A failing image does not stop the rest of the batch.

        Args:
            paths: Local file paths of images or .zip archives
            title: Title for every uploaded image
            tags: Comma-separated tags, e.g. "red, blue"
            category: Category for every uploaded image
            folder: One of list_folders(); defaults to the first folder
        """
        denied = authorization_error(session)
        if denied:
            return denied

        files = []
        unreadable = []
        for path in paths:
            try:
                files.append(UploadFile.from_path(path))
            except OSError as e:
                unreadable.append({"name": path, "error": str(e)})

        progress: List[float] = []
        try:
            report = await session.ingestor.ingest(
                files,
                title=title,
                tags=tags,
                category=category,
                folder=folder or session.ingestor.folders[0],
                on_progress=progress.append,
            )
        except ValueError as e:
            return {"error": str(e)}

        response = report.to_dict()
        response["failed"] = unreadable + response["failed"]
        response["failure_count"] += len(unreadable)
        response["progress"] = progress[-1] if progress else 0.0
        return response
