from __future__ import annotations

import logging
import threading

from kivy.app import App
from kivy.clock import Clock
from kivy.core.window import Window
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.label import Label

from ..actions import set_outcome, set_stage
from ..config import LauncherOptions
from ..orchestrator import LaunchContext, LaunchOrchestrator, LaunchOutcome, Stage
from ..services.subsystems import WINDOW_TITLE, Platform
from ..state import AppState
from .widgets import COLORS, LauncherButton, StatusPanel, apply_bg, rgb_to_kivy

log = logging.getLogger(__name__)

WINDOW_SIZE = (981, 673)


class LauncherApp(App):
    def __init__(self, state: AppState, context: LaunchContext, platform: Platform,
                 options: LauncherOptions, **kwargs):
        super().__init__(**kwargs)
        self.state = state
        self.options = options
        self.orchestrator = LaunchOrchestrator(context, platform, on_stage=self._on_stage)
        self.outcome: LaunchOutcome | None = None
        self.panel: StatusPanel | None = None
        self.launch_button: LauncherButton | None = None

    def build(self):
        self.title = WINDOW_TITLE
        Window.size = WINDOW_SIZE
        Window.bind(on_key_down=self._on_key_down)

        root = BoxLayout(orientation="vertical", padding=16, spacing=10)
        apply_bg(root, rgb_to_kivy(self.options.background_color))

        header = Label(
            text=WINDOW_TITLE,
            font_size="22sp",
            color=COLORS["text"],
            bold=True,
            size_hint_y=None,
            height=48,
        )
        self.panel = StatusPanel()

        controls = BoxLayout(size_hint_y=None, height=44, spacing=8)
        self.launch_button = LauncherButton("Launch")
        self.launch_button.bind(on_release=lambda *_: self.start_launch())
        quit_button = LauncherButton("Quit")
        quit_button.bind(on_release=lambda *_: self.stop())
        controls.add_widget(self.launch_button)
        controls.add_widget(quit_button)

        root.add_widget(header)
        root.add_widget(self.panel)
        root.add_widget(controls)

        self.state.bind(status_text=self._refresh, details=self._refresh, busy=self._refresh)
        Clock.schedule_once(lambda *_: self.start_launch(), 0)
        return root

    def _refresh(self, *_):
        if self.panel is None:
            return
        self.panel.show(self.state.status_text, self.state.details, failed=self.state.stage == Stage.FAILED.value)
        if self.launch_button is not None:
            self.launch_button.set_enabled(not self.state.busy)
            self.launch_button.label.text = "Retry" if self.state.stage == Stage.FAILED.value else "Launch"

    def _on_stage(self, stage: Stage) -> None:
        # called from the worker thread
        Clock.schedule_once(lambda _dt: set_stage(self.state, stage), 0)

    def start_launch(self) -> None:
        if self.state.busy:
            return
        self.state.busy = True
        self.state.details = ""
        self.state.attempts += 1
        log.info("Launch attempt %d", self.state.attempts)

        # locate/validate/compose only touch files: worker thread
        self._in_background(self.orchestrator.prepare, self._prepared)

    def _in_background(self, step, then) -> None:
        def worker():
            try:
                result = step()
            except Exception:
                log.exception("Launch attempt crashed")
                result = None
            Clock.schedule_once(lambda _dt: then(result), 0)

        threading.Thread(target=worker, daemon=True).start()

    def _prepared(self, image) -> None:
        if image is None or isinstance(image, LaunchOutcome):
            self._apply(image)
            return
        # window, mixer and gamepad belong to the main thread
        try:
            report = self.orchestrator.start_subsystems()
        except Exception:
            log.exception("Launch attempt crashed")
            report = None
        if report is None or isinstance(report, LaunchOutcome):
            self._apply(report)
            return
        self._in_background(lambda: self.orchestrator.launch(image, report), self._apply)

    def _apply(self, outcome: LaunchOutcome | None) -> None:
        self.state.busy = False
        if outcome is None:
            set_stage(self.state, Stage.FAILED)
            self.state.details = "Unexpected error, see launcher.log"
            return
        self.outcome = outcome
        set_outcome(self.state, outcome)
        if outcome.ok and not self.options.wait_for_exit:
            self.stop()

    def on_stop(self):
        self.orchestrator.cancel()

    def _on_key_down(self, _window, keycode, _scancode, _codepoint, modifiers):
        key = keycode[1] if isinstance(keycode, tuple) else keycode
        if key in {"enter", "return", 13}:
            self.start_launch()
            return True
        return False
