from __future__ import annotations

from kivy.graphics import Color, Rectangle, Line
from kivy.uix.behaviors import ButtonBehavior
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.label import Label
from kivy.utils import get_color_from_hex


COLORS = {
    "bg": get_color_from_hex("#4271b7"),
    "panel": get_color_from_hex("#22344a"),
    "button": get_color_from_hex("#646496"),
    "button_hover": get_color_from_hex("#9696c8"),
    "border": get_color_from_hex("#323232"),
    "text": get_color_from_hex("#ffffff"),
    "muted": get_color_from_hex("#a7b2bf"),
    "error": get_color_from_hex("#ffdc00"),
}


def rgb_to_kivy(rgb: tuple[int, int, int]) -> list[float]:
    return [c / 255.0 for c in rgb] + [1.0]


def apply_bg(widget, color):
    with widget.canvas.before:
        bg_color = Color(*color)
        bg_rect = Rectangle(pos=widget.pos, size=widget.size)

    def _sync_bg(*_):
        bg_rect.pos = widget.pos
        bg_rect.size = widget.size

    widget.bind(pos=_sync_bg, size=_sync_bg)
    return bg_color, bg_rect


class LauncherButton(ButtonBehavior, BoxLayout):
    def __init__(self, text: str, **kwargs):
        super().__init__(
            orientation="horizontal",
            padding=[12, 6],
            size_hint=(None, None),
            size=(150, 40),
            **kwargs,
        )
        with self.canvas.before:
            self._bg_color = Color(*COLORS["button"])
            self._bg_rect = Rectangle(pos=self.pos, size=self.size)
        with self.canvas.after:
            Color(*COLORS["border"])
            self._border = Line(rectangle=(self.x, self.y, self.width, self.height), width=1.0)

        self.label = Label(
            text=text,
            color=COLORS["text"],
            bold=True,
            halign="center",
            valign="middle",
        )
        self.label.bind(size=self.label.setter("text_size"))
        self.add_widget(self.label)
        self.bind(pos=self._sync_canvas, size=self._sync_canvas)

    def _sync_canvas(self, *_):
        self._bg_rect.pos = self.pos
        self._bg_rect.size = self.size
        self._border.rectangle = (self.x, self.y, self.width, self.height)

    def set_enabled(self, enabled: bool) -> None:
        self.disabled = not enabled
        self._bg_color.rgba = COLORS["button"] if enabled else COLORS["border"]


class StatusPanel(BoxLayout):
    """Stage line on top, full report underneath."""

    def __init__(self, **kwargs):
        super().__init__(orientation="vertical", padding=12, spacing=8, **kwargs)
        apply_bg(self, COLORS["panel"])

        self.stage_label = Label(
            text="Ready",
            color=COLORS["text"],
            bold=True,
            font_size="18sp",
            size_hint_y=None,
            height=32,
            halign="left",
            valign="middle",
        )
        self.stage_label.bind(size=self.stage_label.setter("text_size"))

        self.details_label = Label(
            text="",
            color=COLORS["muted"],
            font_size="13sp",
            halign="left",
            valign="top",
        )
        self.details_label.bind(size=self.details_label.setter("text_size"))

        self.add_widget(self.stage_label)
        self.add_widget(self.details_label)

    def show(self, status: str, details: str, failed: bool = False) -> None:
        self.stage_label.text = status
        self.stage_label.color = COLORS["error"] if failed else COLORS["text"]
        self.details_label.text = details
