import re


def parse_duration(time_str: str) -> float:
    """
    Parse a duration string like '15s', '10m', '1h' into seconds.

    A bare number is taken as seconds.
    """
    if not isinstance(time_str, str):
        raise ValueError("Invalid time string format")

    match = re.fullmatch(r"\s*(\d+(?:\.\d+)?)\s*([smh]?)\s*", time_str)
    if not match:
        raise ValueError(f"Invalid time string format: {time_str!r}")

    value, unit = match.groups()
    seconds = float(value)

    if unit in ("", "s"):
        return seconds
    elif unit == "m":
        return seconds * 60
    else:
        return seconds * 3600
