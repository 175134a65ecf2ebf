"""Built-in icon palette for MindTree nodes.

A node stores the symbol itself, so documents stay readable without this
table; the palette only drives the inspector.
"""

from typing import List, Tuple

ICONS = {
    "markers": {
        "star": "⭐",
        "idea": "💡",
        "hot": "🔥",
        "launch": "🚀",
    },
    "status": {
        "done": "✔️",
        "question": "❓",
        "cross": "❌",
        "warning": "⚠",
    },
    "priority": {
        "critical": "🔴",
        "high": "🟠",
        "medium": "🟡",
        "low": "🟢",
    },
}


def get_icon(category: str, name: str) -> str:
    """Get an icon by category and name."""
    return ICONS.get(category, {}).get(name, "")


def palette() -> List[Tuple[str, str]]:
    """(name, symbol) pairs in display order."""
    return [(name, symbol) for icons in ICONS.values() for name, symbol in icons.items()]
