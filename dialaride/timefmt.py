"""
Conversions between minutes from midnight and clock strings.
"""


def format_time(minutes: float) -> str:
    """
    Format minutes from midnight as HH:MM.
    """
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    return f"{hours:02d}:{mins:02d}"


def format_time_12h(minutes: float) -> str:
    """
    Format minutes from midnight as a 12-hour clock time with AM/PM.
    """
    hours24 = int(minutes // 60)
    mins = int(minutes % 60)
    hours12 = hours24 % 12 or 12
    ampm = "AM" if hours24 < 12 else "PM"
    return f"{hours12}:{mins:02d} {ampm}"


def parse_time(text: str) -> float:
    """
    Parse HH:MM into minutes from midnight.
    """
    parts = text.strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"invalid time: {text!r}")
    hours, mins = int(parts[0]), int(parts[1])
    return float(hours * 60 + mins)


def to_minutes(value: float | int | str) -> float:
    """
    Accept either a number of minutes or an HH:MM string.
    """
    if isinstance(value, str):
        return parse_time(value)
    return float(value)


def format_duration(minutes: float) -> str:
    """
    Human readable duration.
    """
    if minutes < 1:
        return "less than a minute"
    total = round(minutes)
    if total < 60:
        return f"{total} min"
    hours, mins = divmod(total, 60)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"
