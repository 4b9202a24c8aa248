"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_HOURS = 8
BOOKING_INCREMENT_MINUTES = 15
MIN_PASSWORD_LENGTH = 6
MAX_GRID_SIZE = 50

SESSION_HEADER = "x-session-token"

CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type, x-session-token"
CORS_ALLOW_METHODS = "POST, GET, OPTIONS, PUT, DELETE"
