"""Callback signatures shared by the screen view models."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from kept.domain.time_utils import utc_now

# ``on_alert(title, message)`` shows a modal alert.
AlertCallback = Callable[[str, str], None]
# ``on_navigate(path)`` pushes a screen path such as ``/care/<id>``.
NavigateCallback = Callable[[str], None]
# ``on_back()`` returns to the previous screen.
BackCallback = Callable[[], None]
Clock = Callable[[], datetime]

default_clock: Clock = utc_now

ERROR_TITLE = "Error"
SUCCESS_TITLE = "Success"

__all__ = [
    "AlertCallback",
    "BackCallback",
    "Clock",
    "ERROR_TITLE",
    "NavigateCallback",
    "SUCCESS_TITLE",
    "default_clock",
]
