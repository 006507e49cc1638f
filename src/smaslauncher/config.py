from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

OPTIONS_FILE = "launcher.json"


@dataclass(frozen=True)
class LauncherOptions:
    selector: int = 1
    bgtype: int = 1
    background_color: tuple[int, int, int] = (66, 113, 183)
    onload: int = 1                         # 1: close the launcher once the engine starts
    engine_args: tuple[str, ...] = ()
    launch_sound: str = "pg.wav"            # relative to launcher/
    checksums: dict[str, tuple[str, ...]] = field(default_factory=dict)  # extra accepted sha1s

    @property
    def wait_for_exit(self) -> bool:
        return self.onload != 1


def options_path(launcher_dir: Path) -> Path:
    return launcher_dir / OPTIONS_FILE


def _coerce(raw: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(LauncherOptions)}
    out: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            log.debug("Ignoring unknown launcher option: %s", key)
            continue
        if key == "background_color":
            value = tuple(int(c) for c in value)
            if len(value) != 3:
                raise ValueError("background_color needs three components")
        elif key == "engine_args":
            value = tuple(str(a) for a in value)
        elif key == "checksums":
            # a lone sha1 written as a string, not a list
            value = {
                str(k): (str(v),) if isinstance(v, str) else tuple(str(c) for c in v)
                for k, v in dict(value).items()
            }
        elif key in {"selector", "bgtype", "onload"}:
            value = int(value)
        else:
            value = str(value)
        out[key] = value
    return out


def load_launcher_options(launcher_dir: Path) -> LauncherOptions:
    path = options_path(launcher_dir)
    if not path.exists():
        return LauncherOptions()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("top level must be an object")
        return LauncherOptions(**_coerce(raw))
    except (OSError, ValueError, TypeError) as e:
        log.warning("Ignoring unreadable %s (%s); using defaults", path, e)
        return LauncherOptions()


def save_launcher_options(launcher_dir: Path, options: LauncherOptions) -> None:
    launcher_dir.mkdir(parents=True, exist_ok=True)
    payload = asdict(options)
    payload["background_color"] = list(options.background_color)
    payload["engine_args"] = list(options.engine_args)
    payload["checksums"] = {k: list(v) for k, v in options.checksums.items()}
    options_path(launcher_dir).write_text(json.dumps(payload, indent=2), encoding="utf-8")


def with_overrides(options: LauncherOptions, wait: bool | None = None) -> LauncherOptions:
    if wait is None:
        return options
    return replace(options, onload=0 if wait else 1)
