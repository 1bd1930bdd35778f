from __future__ import annotations

from careerdesk.core.events import EventBus
from careerdesk.core.otp import OneTimeCodes

_EVENT_BUS: EventBus | None = None
_ONE_TIME_CODES: OneTimeCodes | None = None


def get_event_bus() -> EventBus:
    global _EVENT_BUS
    if _EVENT_BUS is None:
        _EVENT_BUS = EventBus()
    return _EVENT_BUS


def get_one_time_codes() -> OneTimeCodes:
    global _ONE_TIME_CODES
    if _ONE_TIME_CODES is None:
        _ONE_TIME_CODES = OneTimeCodes()
    return _ONE_TIME_CODES


def reset_runtime() -> None:
    global _EVENT_BUS, _ONE_TIME_CODES
    _EVENT_BUS = None
    _ONE_TIME_CODES = None
