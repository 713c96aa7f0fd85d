"""Token preference persistence (JSON file on disk)."""
import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from mcapfeed.config import TOKENS_FILE
from mcapfeed.constants import PERSISTED_TOKEN_FIELDS
from mcapfeed.models import Token
from mcapfeed.utils import setup_logger

logger = setup_logger(__name__)


def load_saved_tokens(path: Path = TOKENS_FILE) -> Optional[List[Dict]]:
    """
    Load saved token preference records.

    Returns:
        List of preference dicts, or None when nothing usable is stored
    """
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            js = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load saved tokens from {path}: {e}")
        return None

    if not isinstance(js, list):
        logger.warning(f"Ignoring saved tokens in {path}: expected a list")
        return None
    return [t for t in js if isinstance(t, dict) and "id" in t]


def save_tokens(tokens: Sequence[Token], path: Path = TOKENS_FILE) -> bool:
    """Persist only the preference fields of ``tokens``, not their data."""
    records = []
    for token in tokens:
        data = token.to_dict()
        records.append({field: data[field] for field in PERSISTED_TOKEN_FIELDS})

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
    except OSError as e:
        logger.warning(f"Failed to save tokens to {path}: {e}")
        return False
    return True


def merge_token_preferences(tokens: Sequence[Token], saved: Optional[List[Dict]]) -> List[Token]:
    """Apply the saved ``enabled`` flag to matching tokens by id."""
    if not saved:
        return list(tokens)

    prefs = {p["id"]: p for p in saved}
    merged = []
    for token in tokens:
        pref = prefs.get(token.id)
        if pref is not None and "enabled" in pref:
            token = token.with_enabled(bool(pref["enabled"]))
        merged.append(token)
    return merged
