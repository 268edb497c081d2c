"""Internal constants shared across the library."""

REST_PATH = "/rest/v1"
USER_AGENT = "pyfuelmap/1 aiohttp"
GAZETTEER_URL = "https://psgc.gitlab.io/api/cities-municipalities.json"

# ------------------------------------------------------------------
# Viewport fetching
# ------------------------------------------------------------------

#: Maximum latitude span (degrees) at which stations are fetched.
ZOOM_THRESHOLD = 0.05
#: Quiet period after the last region change before a fetch is issued.
DEBOUNCE_SECONDS = 0.8
#: Hard row cap on bounded-box queries.
MAX_STATIONS = 150

# ------------------------------------------------------------------
# Community rules
# ------------------------------------------------------------------

MAX_FAVORITES = 5
INCORRECT_REPORT_THRESHOLD = 3

EARTH_RADIUS_KM = 6371.0

# ------------------------------------------------------------------
# Remote tables, views and procedures
# ------------------------------------------------------------------

STATIONS_TABLE = "fuel_stations"
PENDING_TABLE = "user_reported_locations"
USERS_TABLE = "users"
BRAND_CONFIGS_TABLE = "fuel_brand_configs"
FORECAST_TABLE = "fuel_price_forecast"

RPC_SUBMIT_PRICE_REPORT = "submit_price_report"
RPC_SUBMIT_LOCATION_REPORT = "submit_location_report"
RPC_VERIFY_OR_DENY_REPORT = "verify_or_deny_report"
RPC_VOTE_ON_CONTRIBUTOR = "vote_on_contributor"

# ------------------------------------------------------------------
# PostgREST / Postgres error codes
# ------------------------------------------------------------------

UNIQUE_VIOLATION_CODES: frozenset[str] = frozenset({"23505"})
NO_ROWS_CODES: frozenset[str] = frozenset({"PGRST116"})
AUTH_ERROR_CODES: frozenset[str] = frozenset({"PGRST301", "PGRST302", "42501"})
