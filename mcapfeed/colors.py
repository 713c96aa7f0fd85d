"""Display colors for tokens the user adds."""
import zlib

from plotly.colors import qualitative

# Stable color palette for consistent token colors
PALETTE = (
    qualitative.Plotly
    + qualitative.D3
    + qualitative.Safe
    + qualitative.Pastel
)


def color_for(symbol: str) -> str:
    """
    Get a stable color for a symbol.

    Uses a CRC of the upper-cased symbol so the same symbol gets the same
    color across processes (``hash()`` is salted per interpreter).

    Args:
        symbol: Token symbol (e.g., "PEPE")

    Returns:
        Color string from the plotly qualitative palettes
    """
    return PALETTE[zlib.crc32(symbol.upper().encode("utf-8")) % len(PALETTE)]
