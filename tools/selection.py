"""Selection tools"""

from mcp.server.fastmcp import FastMCP

from managers.session import CatalogSession
from tools.helpers import authorization_error


def register_selection_tools(mcp: FastMCP, session: CatalogSession):
    """Register selection tools with the MCP server"""

    def _selection_state() -> dict:
        ids = session.selection.selected_ids()
        return {"selected": ids, "count": len(ids)}

    @mcp.tool()
    def toggle_selection(asset_id: str) -> dict:
        """Select an asset, or deselect it if it is already selected"""
        denied = authorization_error(session)
        if denied:
            return denied
        try:
            selected = session.selection.toggle(asset_id)
        except KeyError:
            return {"error": f"Asset {asset_id} not found"}
        return {"asset_id": asset_id, "is_selected": selected, **_selection_state()}

    @mcp.tool()
    def select_group(group: str, group_by: str = "folder") -> dict:
        """Select every asset in a group; if all are already selected, deselect them.

        Args:
            group: Group name as returned by list_groups
            group_by: "folder" or "category"
        """
        denied = authorization_error(session)
        if denied:
            return denied
        try:
            ids = session.catalog.group_ids(group, group_by)
        except ValueError as e:
            return {"error": str(e)}
        if not ids:
            return {"error": f"Group '{group}' has no assets"}
        group_selected = session.selection.select_all_in(ids)
        return {"group": group, "group_selected": group_selected, **_selection_state()}

    @mcp.tool()
    def clear_selection() -> dict:
        """Deselect everything"""
        denied = authorization_error(session)
        if denied:
            return denied
        session.selection.clear()
        return _selection_state()

    @mcp.tool()
    def get_selection() -> dict:
        """List selected asset ids in the order they were selected"""
        denied = authorization_error(session)
        if denied:
            return denied
        return _selection_state()
