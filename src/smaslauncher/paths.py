from __future__ import annotations
from pathlib import Path


def install_dir() -> Path:
    # The launcher runs from the game's install folder, next to the engine binary.
    return Path.cwd().resolve()

def sfc_dir(root: Path) -> Path:
    return root / "sfcs" # user-supplied ROMs

def launcher_dir(root: Path) -> Path:
    return root / "launcher" # launcher.json, sounds

def ensure_dirs(root: Path) -> None:
    for d in (sfc_dir(root), launcher_dir(root)):
        d.mkdir(parents=True, exist_ok=True)
