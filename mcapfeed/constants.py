"""Constants and default values for the market cap feed."""
from typing import Dict, List, Tuple, Union

DayRange = Union[int, str]

# Selectable ranges: (label, days). "max" asks each provider for its longest history.
TIME_RANGES: Tuple[Tuple[str, DayRange], ...] = (
    ("1d", 1),
    ("7d", 7),
    ("30d", 30),
    ("max", "max"),
)
MAX_RANGE = "max"

DAY_MS = 24 * 60 * 60 * 1000

# Supported chains: (platform id, display name)
PLATFORMS: List[Tuple[str, str]] = [
    ("ethereum", "Ethereum"),
    ("base", "Base"),
    ("solana", "Solana"),
]

# Platform id -> provider network id
GECKOTERMINAL_NETWORKS: Dict[str, str] = {
    "ethereum": "eth",
    "base": "base",
    "solana": "solana",
}
DEXPAPRIKA_NETWORKS: Dict[str, str] = {
    "ethereum": "ethereum",
    "base": "base",
    "solana": "solana",
}
DEXSCREENER_CHAINS: Dict[str, str] = {
    "ethereum": "ethereum",
    "base": "base",
    "solana": "solana",
}

# Provider history limits
GECKOTERMINAL_MAX_DAYS = 180  # ~6 months of OHLCV on the free API
GECKOTERMINAL_MAX_SAMPLES = 1000
DEXPAPRIKA_MAX_DAYS = 365
DEXPAPRIKA_MAX_SAMPLES = 366

# Default token list: (id, symbol, name, color, platform, contract)
DEFAULT_TOKENS: List[Tuple[str, str, str, str, str, str]] = [
    ("pepe", "PEPE", "Pepe", "#4BC0C0", "ethereum", "0x6982508145454Ce325dDbE47a25d4ec3d2311933"),
    ("brett", "BRETT", "Brett", "#36A2EB", "base", "0x532f27101965dd16442E59d40670FaF5eBB142E4"),
    ("degen-base", "DEGEN", "Degen", "#9966FF", "base", "0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed"),
    ("bonk", "BONK", "Bonk", "#FF9F40", "solana", "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"),
    ("dogwifcoin", "WIF", "dogwifhat", "#FF6384", "solana", "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"),
]

# Fields persisted for each token preference record
PERSISTED_TOKEN_FIELDS = ("id", "symbol", "name", "color", "enabled", "isCustom")
