"""
Application-wide constants for exilian.

Centralizes endpoints, defaults and tuning values so the loader, fetcher
and CLI agree on them.
"""

# =============================================================================
# poe.ninja API
# =============================================================================

# Base URL for the poe.ninja economy endpoints
POE_NINJA_BASE_URL = "https://poe.ninja/api/data"

# Overview endpoints, one per dataset family
CURRENCY_OVERVIEW_ENDPOINT = "currencyoverview"
ITEM_OVERVIEW_ENDPOINT = "itemoverview"

# Name of the record array inside an overview response
RESPONSE_LINES_KEY = "lines"

# Default User-Agent sent with every request
USER_AGENT_DEFAULT = "exilian/0.2 (+https://github.com/exilian/exilian)"


# =============================================================================
# Network Timeouts (seconds)
# =============================================================================

# Time allowed to establish a connection
API_TIMEOUT_CONNECT = 10

# Time allowed between bytes of the response
API_TIMEOUT_READ = 10

# Connection-establishment retries (never re-sends a request that reached the server)
API_CONNECT_RETRIES = 2


# =============================================================================
# Caching
# =============================================================================

# Snapshots younger than this are served without touching the network
CACHE_THRESHOLD_MINUTES = 15

# Lower bound accepted from configuration
CACHE_THRESHOLD_MIN_MINUTES = 1

# Cache directory name under ~/.cache
CACHE_DIR_NAME = "exilian"

# Extension of a cache slot file
CACHE_FILE_SUFFIX = ".json"


# =============================================================================
# Application directories
# =============================================================================

# Per-user directory holding config.json and the log file
APP_DIR_NAME = ".exilian"

CONFIG_FILE_NAME = "config.json"

LOG_FILE_NAME = "exilian.log"

# Rotating log file size and backups
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
