"""Editor settings."""

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from mindtree.model import Size


ENV_DATA_DIR = "MINDTREE_DATA_DIR"
ENV_SKIP_PREFLIGHT = "MINDTREE_SKIP_PREFLIGHT"


def get_data_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get(ENV_DATA_DIR)
    data_dir = Path(override).expanduser() if override else Path.home() / ".local" / "share" / "mindtree"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


@dataclass
class EditorSettings:
    """Tunable editor behaviour, persisted as JSON."""
    default_node_width: float = 150.0
    default_node_height: float = 50.0
    drag_threshold: float = 5.0
    snap_tolerance: float = 5.0
    snap_enabled: bool = True
    max_history: int = 100
    child_offset_x: float = 200.0
    child_offset_y: float = 0.0
    default_font_size: int = 16
    autosave_interval: int = 30

    @property
    def default_size(self) -> Size:
        return Size(self.default_node_width, self.default_node_height)

    @property
    def child_offset(self):
        return (self.child_offset_x, self.child_offset_y)

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: Optional[str]) -> "EditorSettings":
        if not data:
            return cls()
        try:
            d = json.loads(data)
            # Filter to only known fields to handle schema evolution
            known = {f.name for f in cls.__dataclass_fields__.values()}
            return cls(**{k: v for k, v in d.items() if k in known})
        except (json.JSONDecodeError, TypeError, AttributeError):
            return cls()
