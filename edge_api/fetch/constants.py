"""HTTP constants for the upstream fetch layer.

Centralizes status ranges, chain deadlines and cache TTLs so routes and
providers never hard-code them.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_FORBIDDEN = 403
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_SERVER_ERROR_MIN = 500

# Shared deadlines for a whole provider chain (seconds)
DATA_CHAIN_TIMEOUT_SECONDS = 4.5
WEATHER_CHAIN_TIMEOUT_SECONDS = 6.0
RATES_CHAIN_TIMEOUT_SECONDS = 4.5

# Single-provider upstream timeouts (seconds)
FORECAST_TIMEOUT_SECONDS = 6.0
GEOCODING_TIMEOUT_SECONDS = 6.0
BRIDGE_CONTROL_TIMEOUT_SECONDS = 10.0
PROXY_CONNECT_TIMEOUT_SECONDS = 10.0

# Response cache TTLs (seconds)
DATA_CACHE_TTL_SECONDS = 30
WEATHER_NOW_CACHE_TTL_SECONDS = 120
FORECAST_CACHE_TTL_SECONDS = 900
RATES_CACHE_TTL_SECONDS = 21600
GEOCODING_CACHE_TTL_SECONDS = 86400
STATUS_CACHE_MAX_AGE_SECONDS = 5

# Default outbound User-Agent
DEFAULT_USER_AGENT = "edge-api/1.0"
