"""Metadata edit tools"""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from managers.session import CatalogSession
from tools.helpers import authorization_error, record_response


def register_edit_tools(mcp: FastMCP, session: CatalogSession):
    """Register metadata edit tools with the MCP server"""

    edit_session = session.edit_session

    def _edit_state() -> dict:
        draft = edit_session.draft
        return {
            "state": edit_session.state.value,
            "asset_id": edit_session.asset_id,
            "draft": {"title": draft.title, "tags": draft.tags, "category": draft.category} if draft else None,
            "last_error": edit_session.last_error,
        }

    @mcp.tool()
    def begin_edit(asset_id: str) -> dict:
        """Open an edit for one asset, pre-filled with its current metadata.

        Tags are presented as one comma-separated string.
        """
        denied = authorization_error(session)
        if denied:
            return denied
        try:
            edit_session.begin(asset_id)
        except KeyError:
            return {"error": f"Asset {asset_id} not found"}
        return _edit_state()

    @mcp.tool()
    def update_edit(
        title: Optional[str] = None,
        tags: Optional[str] = None,
        category: Optional[str] = None,
    ) -> dict:
        """Change fields of the open edit draft.

        Args:
            title: New title
            tags: Comma-separated tags, e.g. "red, blue, green"
            category: New category
        """
        denied = authorization_error(session)
        if denied:
            return denied
        try:
            edit_session.update(title=title, tags=tags, category=category)
        except RuntimeError as e:
            return {"error": str(e)}
        return _edit_state()

    @mcp.tool()
    async def save_edit() -> dict:
        """Save the open edit to the remote store.

        On failure the edit stays open with the same draft so it can be
        retried.
        """
        denied = authorization_error(session)
        if denied:
            return denied
        try:
            outcome = await edit_session.save()
        except RuntimeError as e:
            return {"error": str(e)}
        if not outcome.ok:
            return {"success": False, "error": outcome.error, **_edit_state()}
        return {"success": True, "asset": record_response(session, outcome.record), **_edit_state()}

    @mcp.tool()
    def cancel_edit() -> dict:
        """Discard the open edit"""
        denied = authorization_error(session)
        if denied:
            return denied
        edit_session.cancel()
        return _edit_state()

    @mcp.tool()
    def get_edit_state() -> dict:
        """Show whether an edit is open and its current draft"""
        denied = authorization_error(session)
        if denied:
            return denied
        return _edit_state()
