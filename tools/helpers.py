"""Shared helper functions for tool implementations"""

import logging
from typing import Any, Dict, Optional

from managers.session import CatalogSession
from models.asset import AssetRecord

logger = logging.getLogger("MCP_Server")


def authorization_error(session: CatalogSession) -> Optional[Dict[str, Any]]:
    """Response for a closed session gate, or None when the operator may act.

    Nothing from the catalog is returned to an unauthorized caller; the
    response points at the external login flow instead.
    """
    if session.gate.is_authorized():
        return None
    return {
        "error": session.gate.reason,
        "login_url": session.gate.login_url,
    }


def record_response(session: CatalogSession, record: AssetRecord) -> Dict[str, Any]:
    """Build response data for one asset, including its display URL"""
    data = record.to_dict()
    data["display_url"] = session.display_url(record.image_ref)
    data["selected"] = session.selection.is_selected(record.asset_id)
    return data
