import os

NASA_API_KEY = os.getenv("NASA_API_KEY", "DEMO_KEY")
NASA_API_BASE = os.getenv("NASA_API_BASE", "https://api.nasa.gov/neo/rest/v1")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./neo_feed.db")

UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "10"))
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "300"))
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "1024"))
# NASA feed endpoint refuses ranges longer than a week
MAX_RANGE_DAYS = int(os.getenv("MAX_RANGE_DAYS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
