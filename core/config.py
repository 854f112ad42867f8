"""
Configuration management for exilian.
Reads user settings from a JSON file, filling gaps with defaults.
"""

import json
import logging
import copy
from pathlib import Path
from typing import Optional, Dict, Any

from core.catalog import League
from core.constants import (
    API_CONNECT_RETRIES,
    API_TIMEOUT_CONNECT,
    API_TIMEOUT_READ,
    APP_DIR_NAME,
    CACHE_DIR_NAME,
    CACHE_THRESHOLD_MIN_MINUTES,
    CACHE_THRESHOLD_MINUTES,
    CONFIG_FILE_NAME,
    POE_NINJA_BASE_URL,
    USER_AGENT_DEFAULT,
)

logger = logging.getLogger(__name__)


def get_app_dir() -> Path:
    """
    Get the application directory.

    Returns:
        Path to the app directory (~/.exilian/)
    """
    return Path.home() / APP_DIR_NAME


def get_default_cache_dir() -> Path:
    """Default snapshot cache directory (~/.cache/exilian/)."""
    return Path.home() / ".cache" / CACHE_DIR_NAME


class Config:
    """
    Read-only application configuration loaded from JSON.

    Values read by the CLI:
    - "league": league used when none (or an invalid one) is given
    - "cache": snapshot cache directory and freshness threshold
    - "api": poe.ninja base URL, timeouts, retries, User-Agent
    """

    # NOTE: This structure is treated as immutable. Always use
    # _default_config_deepcopy() when you need a fresh copy of defaults.
    DEFAULT_CONFIG: Dict[str, Any] = {
        "league": League.default().value,
        "cache": {
            # None = ~/.cache/exilian
            "dir": None,
            # Snapshots younger than this are served without a request
            "threshold_minutes": CACHE_THRESHOLD_MINUTES,
        },
        "api": {
            "base_url": POE_NINJA_BASE_URL,
            "user_agent": USER_AGENT_DEFAULT,
            # Requests supports tuple (connect, read); stored separately
            "timeouts": {
                "connect": API_TIMEOUT_CONNECT,
                "read": API_TIMEOUT_READ,
            },
            # Retries for connection establishment only
            "connect_retries": API_CONNECT_RETRIES,
        },
    }

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Optional path to config JSON file. When omitted,
                         ~/.exilian/config.json is used.
        """
        self.config_file: Path = self._resolve_config_path(config_file)

        # Load data from disk (or defaults)
        self.data: Dict[str, Any] = self._load()
        logger.debug(f"Config loaded from {self.config_file}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_config_path(config_file: Optional[Path]) -> Path:
        if config_file is not None:
            return Path(config_file)
        return get_app_dir() / CONFIG_FILE_NAME

    def _load(self) -> Dict[str, Any]:
        """Load configuration from JSON file, merging with defaults."""
        if not self.config_file.exists():
            logger.debug("No config file found, using defaults")
            return self._default_config_deepcopy()

        try:
            with self.config_file.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error(f"Failed to load config: {exc}. Using defaults.")
            return self._default_config_deepcopy()

        if not isinstance(raw, dict):
            logger.error("Config file is not a JSON object. Using defaults.")
            return self._default_config_deepcopy()

        return self._merge_with_defaults(raw)

    @classmethod
    def _default_config_deepcopy(cls) -> Dict[str, Any]:
        """Return a deep copy of DEFAULT_CONFIG to avoid state leakage."""
        return copy.deepcopy(cls.DEFAULT_CONFIG)

    def _merge_with_defaults(self, user_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge user config with defaults to handle new keys.

        Nested sections are merged so new keys under e.g. "api" appear
        without discarding user-provided values.
        """
        merged = self._default_config_deepcopy()

        for key, value in user_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key].update(value)
            else:
                merged[key] = value

        return merged

    def _section(self, name: str) -> Dict[str, Any]:
        """Return a config section, or an empty dict if it is missing or not an object."""
        section = self.data.get(name)
        return section if isinstance(section, dict) else {}

    # ------------------------------------------------------------------
    # League
    # ------------------------------------------------------------------

    @property
    def league(self) -> League:
        """Configured default league; falls back to the built-in default."""
        found, league = League.from_name_or_default(self.data.get("league"))
        if not found:
            logger.warning(f"Invalid league in config: {self.data.get('league')!r}")
        return league

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    @property
    def cache_dir(self) -> Path:
        """Snapshot cache directory."""
        raw = self._section("cache").get("dir")
        if not raw or not isinstance(raw, str):
            return get_default_cache_dir()
        return Path(raw).expanduser()

    @property
    def threshold_minutes(self) -> float:
        """Freshness threshold in minutes (at least 1)."""
        raw = self._section("cache").get("threshold_minutes", CACHE_THRESHOLD_MINUTES)
        try:
            value = float(raw)
        except (TypeError, ValueError, OverflowError):
            return float(CACHE_THRESHOLD_MINUTES)
        return max(float(CACHE_THRESHOLD_MIN_MINUTES), value)

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> str:
        return str(self._section("api").get("base_url") or POE_NINJA_BASE_URL)

    @property
    def user_agent(self) -> str:
        return str(self._section("api").get("user_agent") or USER_AGENT_DEFAULT)

    @property
    def connect_retries(self) -> int:
        """Connection retries (0..5)."""
        raw = self._section("api").get("connect_retries", API_CONNECT_RETRIES)
        try:
            return max(0, min(5, int(raw)))
        except (TypeError, ValueError, OverflowError):
            return API_CONNECT_RETRIES

    def get_api_timeouts(self) -> tuple[int, int]:
        """
        Return (connect, read) timeouts in seconds for API calls.

        Unparseable values fall back to the defaults.
        """
        t = self._section("api").get("timeouts")
        if not isinstance(t, dict):
            t = {}
        try:
            connect = int(t.get("connect", API_TIMEOUT_CONNECT))
        except (TypeError, ValueError, OverflowError):
            connect = API_TIMEOUT_CONNECT
        try:
            read = int(t.get("read", API_TIMEOUT_READ))
        except (TypeError, ValueError, OverflowError):
            read = API_TIMEOUT_READ
        # Guardrails
        connect = max(1, min(120, connect))
        read = max(1, min(300, read))
        return connect, read
