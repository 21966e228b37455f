"""Default application paths."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_ROOT = Path("~/gaitimu")


@dataclass
class AppPaths:
    """
    Commonly used paths for the recorder.

    ``GAITIMU_DATA_ROOT`` overrides the default ``~/gaitimu`` folder so
    that alternate layouts can store recordings elsewhere.
    """

    data_root: Path = field(init=False)
    recordings: Path = field(init=False)

    def __post_init__(self) -> None:
        env_data_root = os.environ.get("GAITIMU_DATA_ROOT")
        if env_data_root:
            self.data_root = Path(env_data_root).expanduser()
        else:
            self.data_root = DEFAULT_DATA_ROOT.expanduser()

        self.recordings = self.data_root / "recordings"
