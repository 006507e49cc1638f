from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import load_launcher_options, with_overrides
from .logging_setup import setup_logging
from .orchestrator import LaunchContext, LaunchOrchestrator, LaunchOutcome
from .paths import ensure_dirs, install_dir, launcher_dir
from .report import format_outcome
from .services.subsystems import select_platform


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smas-launcher", description="Prepare and start the SMAS/SMW engine.")
    parser.add_argument("--dir", type=Path, default=None, help="install directory (default: current directory)")
    wait = parser.add_mutually_exclusive_group()
    wait.add_argument("--wait", dest="wait", action="store_true", default=None,
                      help="stay open until the engine exits and report its exit code")
    wait.add_argument("--no-wait", dest="wait", action="store_false",
                      help="close once the engine is running")
    parser.add_argument("--console", action="store_true", help="print status instead of opening the status window")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def exit_code_for(outcome: LaunchOutcome | None) -> int:
    if outcome is None or not outcome.ok:
        return 1
    return outcome.exit_code or 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    root = (args.dir or install_dir()).resolve()
    ensure_dirs(root)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, launcher_dir(root) / "launcher.log")
    log = logging.getLogger(__name__)
    log.info("Install directory: %s", root)

    options = with_overrides(load_launcher_options(launcher_dir(root)), wait=args.wait)
    context = LaunchContext.from_options(root, options)
    platform = select_platform(window=not args.console)

    if args.console:
        outcome = LaunchOrchestrator(context, platform).run()
        print(format_outcome(outcome))
        return exit_code_for(outcome)

    # importing kivy.core.window opens a window, so console runs never import the ui
    from .state import AppState
    from .ui.app import LauncherApp

    app = LauncherApp(AppState(), context, platform, options)
    app.run()
    return exit_code_for(app.outcome)


if __name__ == "__main__":
    raise SystemExit(main())
