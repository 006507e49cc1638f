from __future__ import annotations
from kivy.event import EventDispatcher
from kivy.properties import (
    StringProperty, BooleanProperty, NumericProperty
)
# State shown by the status window
class AppState(EventDispatcher):
    stage = StringProperty("idle") # current pipeline stage
    status_text = StringProperty("Ready") # one-line status
    details = StringProperty("") # full outcome report
    busy = BooleanProperty(False) # a launch attempt is running
    attempts = NumericProperty(0) # launch attempts this session
