"""Settings management for the catalog server"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from managers.upload_ingestor import DEFAULT_FOLDERS

logger = logging.getLogger("MCP_Server")

# Configuration paths
CONFIG_DIR = Path.home() / ".config" / "image-catalog-mcp"
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_VARS = {
    "project_id": "SANITY_PROJECT_ID",
    "dataset": "SANITY_DATASET",
    "api_version": "SANITY_API_VERSION",
    "token": "SANITY_API_TOKEN",
    "download_dir": "CATALOG_DOWNLOAD_DIR",
    "share_dir": "CATALOG_SHARE_DIR",
    "login_url": "CATALOG_LOGIN_URL",
}
SECRET_KEYS = {"token"}


class SettingsManager:
    """Resolves settings with precedence: runtime > config > env > hardcoded"""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self._runtime_settings: Dict[str, Any] = {}
        self._hardcoded_settings: Dict[str, Any] = {
            "project_id": None,
            "dataset": "production",
            "api_version": "2023-05-03",
            "token": None,
            "document_type": "imageAsset",
            "display_width": 800,
            "request_timeout": 30,
            "download_dir": str(Path.home() / "Downloads"),
            "share_dir": None,
            "login_url": "/login",
            "folders": list(DEFAULT_FOLDERS),
        }
        self._config_settings = self._load_config_settings()

    def _load_config_settings(self) -> Dict[str, Any]:
        """Load settings from config file"""
        if not self.config_file.exists():
            return {}
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config file {self.config_file}: {e}")
            return {}
        settings = config.get("settings", {}) if isinstance(config, dict) else {}
        return {k: v for k, v in settings.items() if k in self._hardcoded_settings}

    def _get_env_settings(self) -> Dict[str, Any]:
        """Load settings from environment variables"""
        settings = {}
        for key, env_name in ENV_VARS.items():
            value = os.getenv(env_name)
            if value:
                settings[key] = value
        return settings

    def get(self, key: str) -> Any:
        if key in self._runtime_settings:
            return self._runtime_settings[key]
        if key in self._config_settings:
            return self._config_settings[key]
        env_settings = self._get_env_settings()
        if key in env_settings:
            return env_settings[key]
        return self._hardcoded_settings.get(key)

    def get_all(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Get all effective settings (merged from all sources)"""
        result = dict(self._hardcoded_settings)
        result.update(self._get_env_settings())
        result.update(self._config_settings)
        result.update(self._runtime_settings)
        if not include_secrets:
            for key in SECRET_KEYS:
                result[key] = "***" if result.get(key) else None
        return result

    def validate(self, settings: Dict[str, Any]) -> List[str]:
        errors = []
        for key, value in settings.items():
            if key not in self._hardcoded_settings:
                errors.append(f"Unknown setting '{key}'")
            elif key in ("display_width", "request_timeout"):
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(f"Setting '{key}' must be a positive integer")
            elif key == "folders":
                if not isinstance(value, list) or not value or not all(isinstance(f, str) and f for f in value):
                    errors.append("Setting 'folders' must be a non-empty list of names")
            elif value is not None and not isinstance(value, str):
                errors.append(f"Setting '{key}' must be a string")
        return errors

    def set_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Set runtime settings. Returns validation errors if any."""
        errors = self.validate(settings)
        if errors:
            return {"errors": errors}
        self._runtime_settings.update(settings)
        return {"success": True, "updated": sorted(settings)}

    def persist_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Persist settings to config file; secrets are never written"""
        errors = self.validate(settings)
        if errors:
            return {"errors": errors}
        persisted = {k: v for k, v in settings.items() if k not in SECRET_KEYS}

        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        config = {}
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config = json.load(f)
            except (json.JSONDecodeError, IOError):
                config = {}
        if not isinstance(config, dict):
            config = {}
        config.setdefault("settings", {}).update(persisted)

        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            return {"error": f"Failed to write config file: {e}"}
        self._config_settings = self._load_config_settings()
        return {"success": True, "persisted": sorted(persisted)}
