"""Catalog browsing tools"""

from mcp.server.fastmcp import FastMCP

from managers.session import AuthorizationError, CatalogSession
from tools.helpers import authorization_error, record_response


def register_catalog_tools(mcp: FastMCP, session: CatalogSession):
    """Register catalog browsing tools with the MCP server"""

    @mcp.tool()
    async def reload_catalog() -> dict:
        """Reload every asset from the remote store, replacing the local catalog.

        If the store cannot be reached the catalog is left empty and the error
        is returned.
        """
        try:
            report = await session.load()
        except AuthorizationError as e:
            return {"error": e.reason, "login_url": e.login_url}
        return report.to_dict()

    @mcp.tool()
    def list_groups(group_by: str = "folder", query: str = "") -> dict:
        """List assets grouped by folder or category, optionally filtered.

        Every group is listed even when the search leaves it empty.

        Args:
            group_by: "folder" (falls back to category) or "category"
            query: Case-insensitive text matched against title, tags and category
        """
        denied = authorization_error(session)
        if denied:
            return denied
        try:
            groups = session.catalog.apply(group_by, query)
        except ValueError as e:
            return {"error": str(e)}
        return {
            "group_by": group_by,
            "query": query,
            "groups": {
                name: [record_response(session, record) for record in records]
                for name, records in groups.items()
            },
            "count": sum(len(records) for records in groups.values()),
        }

    @mcp.tool()
    def search_assets(query: str) -> dict:
        """Search the whole catalog by title, tag or category"""
        denied = authorization_error(session)
        if denied:
            return denied
        matches = session.catalog.filter(query)
        return {
            "query": query,
            "assets": [record_response(session, record) for record in matches],
            "count": len(matches),
        }

    @mcp.tool()
    def get_asset(asset_id: str) -> dict:
        """Get one asset's metadata and display URL"""
        denied = authorization_error(session)
        if denied:
            return denied
        record = session.catalog.get(asset_id)
        if record is None:
            return {"error": f"Asset {asset_id} not found. Reload the catalog if it was just created."}
        return record_response(session, record)
