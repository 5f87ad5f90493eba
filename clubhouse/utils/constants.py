"""
Constants used across the Clubhouse backend.
"""

import os

# Team and club names must be at least this long after trimming
MIN_TEAM_NAME_LENGTH = 3

# Minimum password length accepted at registration
MIN_PASSWORD_LENGTH = 6

# Role lookup retry policy (transient backend errors only)
ROLE_FETCH_MAX_ATTEMPTS = int(os.getenv("ROLE_FETCH_MAX_ATTEMPTS", "5"))
ROLE_FETCH_RETRY_DELAY_SECONDS = float(os.getenv("ROLE_FETCH_RETRY_DELAY_SECONDS", "3"))

# Role assumed when an identity has no profile yet (registration race)
DEFAULT_SIGNED_IN_ROLE = "player"

# Directory pagination
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# Upper bound appended to a prefix for half-open range searches
PREFIX_SEARCH_SENTINEL = "\uf8ff"
