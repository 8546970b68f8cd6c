from .time import Clock, Deadline, parse_rfc3339, parse_rfc3339_or_none

__all__ = [
    "Clock",
    "Deadline",
    "parse_rfc3339",
    "parse_rfc3339_or_none",
]
