def seconds_to_duration(seconds: float) -> str:
    """
    Translate a number of seconds into an ISO-8601 duration.

    Fractions are rounded to whole seconds, e.g. 90 -> "PT1M30S",
    3600 -> "PT1H", 0 -> "PT0S". Negative values raise ValueError.
    """
    if seconds < 0:
        raise ValueError(f"Duration cannot be negative: {seconds}")

    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}H")
    if minutes:
        parts.append(f"{minutes}M")
    if secs or not parts:
        parts.append(f"{secs}S")

    return "PT" + "".join(parts)
