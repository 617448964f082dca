"""Configuration tools for the catalog server"""

from typing import Any, Callable, Dict, List, Optional

from mcp.server.fastmcp import FastMCP


def register_configuration_tools(
    mcp: FastMCP,
    settings_manager,
    on_change: Optional[Callable[[List[str]], None]] = None
):
    """Register configuration tools with the MCP server"""

    @mcp.tool()
    def get_settings() -> dict:
        """Get current effective settings.

        Returns merged settings from all sources (runtime, config, env, hardcoded).
        The API token is masked.
        """
        return settings_manager.get_all()

    @mcp.tool()
    def set_settings(settings: Dict[str, Any], persist: bool = False) -> dict:
        """Set runtime settings such as download_dir, share_dir or display_width.

        Changes apply immediately. Changing store connection settings
        (project_id, dataset, token) empties the catalog until reload_catalog.

        Args:
            settings: Mapping of setting name to value, e.g. {"display_width": 1200}
            persist: If True, also write them to ~/.config/image-catalog-mcp/config.json
                (the API token is never written).
        """
        result = settings_manager.set_settings(settings)
        if "errors" in result:
            return {"success": False, "errors": result["errors"]}
        if persist:
            persist_result = settings_manager.persist_settings(settings)
            if "error" in persist_result:
                return {"success": False, "errors": [persist_result["error"]]}
        if on_change:
            on_change(result["updated"])
        return result
