"""Environment-driven settings, read once at import (a `.env` file is honoured)."""

import os

from dotenv import load_dotenv

load_dotenv()

# Airport dataset. Empty means the bundled `airportsdata` ICAO dataset.
AIRPORTS_DATA_PATH: str = os.getenv("AIRPORTS_DATA_PATH", "")

# Database (home airport / onboarding key-value store)
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./travelblock.db")

# Search limits
SEARCH_RESULT_LIMIT: int = int(os.getenv("SEARCH_RESULT_LIMIT", 500))
SEARCH_MAX_QUERY_LENGTH: int = int(os.getenv("SEARCH_MAX_QUERY_LENGTH", 100))
MAX_CODE_LENGTH: int = int(os.getenv("MAX_CODE_LENGTH", 10))

# Location lookup
LOCATION_LOOKUP_URL: str = os.getenv("LOCATION_LOOKUP_URL", "https://ipapi.co/json/")
LOCATION_TIMEOUT_SECONDS: float = float(os.getenv("LOCATION_TIMEOUT_SECONDS", 5))
