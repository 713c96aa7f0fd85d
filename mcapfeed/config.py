"""Configuration settings for the market cap feed."""
import os
from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Cache Configuration
CACHE_TTL_SECONDS = float(os.getenv("MCAPFEED_CACHE_TTL", "300"))  # 5 minutes

# Request / Retry Configuration
REQUEST_TIMEOUT = float(os.getenv("MCAPFEED_REQUEST_TIMEOUT", "30"))
MAX_RETRIES = int(os.getenv("MCAPFEED_MAX_RETRIES", "2"))  # Extra attempts after the first
RETRY_WAIT = float(os.getenv("MCAPFEED_RETRY_WAIT", "2.0"))
BACKOFF_MULTIPLIER = 2

# Provider API Configuration
GECKOTERMINAL_API_BASE = os.getenv("GECKOTERMINAL_API_BASE", "https://api.geckoterminal.com/api/v2")
DEXPAPRIKA_API_BASE = os.getenv("DEXPAPRIKA_API_BASE", "https://api.dexpaprika.com")
DEXSCREENER_API_BASE = os.getenv("DEXSCREENER_API_BASE", "https://api.dexscreener.com/latest")

# GeckoTerminal allows 30 calls/min on the free tier
GECKOTERMINAL_MIN_INTERVAL = float(os.getenv("GECKOTERMINAL_MIN_INTERVAL", "2.0"))

# Supply used when a provider exposes no price/valuation pair (price * 1e9).
# Rough approximation, not a real supply figure.
FALLBACK_SUPPLY_MULTIPLIER = float(os.getenv("MCAPFEED_FALLBACK_SUPPLY", "1e9"))

# Logging Configuration
LOG_DIR = Path(os.getenv("MCAPFEED_LOG_DIR", str(PROJECT_ROOT / "logs")))
LOG_LEVEL = os.getenv("MCAPFEED_LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("MCAPFEED_LOG_TO_FILE", "true").lower() == "true"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Export Configuration
EXPORT_DIR = Path(os.getenv("MCAPFEED_EXPORT_DIR", str(PROJECT_ROOT / "exports")))

# Token preferences file
TOKENS_FILE = Path(os.getenv("MCAPFEED_TOKENS_FILE", str(PROJECT_ROOT / "tokens.json")))
