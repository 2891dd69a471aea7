from datetime import datetime, timedelta

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR


def to_epoch_ms(when: datetime) -> int:
    """Milliseconds since the epoch; naive datetimes are taken as local time."""
    return int(round(when.timestamp() * 1000))


def from_epoch_ms(time_ms: int) -> datetime:
    """Local (naive) datetime for an epoch-ms timestamp."""
    return datetime.fromtimestamp(time_ms / 1000)


def hours_between(start_ms: int, end_ms: int) -> float:
    return (end_ms - start_ms) / MS_PER_HOUR


def time_of_day_bands(start_ms: int, end_ms: int, from_hour: float, to_hour: float) -> list[tuple[int, int]]:
    """
    Recurring clock-time windows inside [start_ms, end_ms], in local time.

    Each band covers [from_hour, to_hour) of the day, or wraps past midnight
    when from_hour > to_hour (e.g. 22 -> 7 for night). Bands are clipped to
    the window and returned as (band_start_ms, band_end_ms) in time order.
    A 24 h span (0 -> 24) covers the whole window as one band. Returns [] if
    the window is empty or from_hour == to_hour.
    """
    if end_ms <= start_ms or from_hour == to_hour:
        return []

    length = timedelta(hours=(to_hour - from_hour) % 24 or 24)

    # Start one day early so a band that began yesterday is still caught.
    day = from_epoch_ms(start_ms).replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=1)
    last_day = from_epoch_ms(end_ms)

    bands: list[tuple[int, int]] = []
    while day <= last_day:
        band_start = day + timedelta(hours=from_hour)
        band_end = band_start + length
        s = max(to_epoch_ms(band_start), start_ms)
        e = min(to_epoch_ms(band_end), end_ms)
        if s < e and bands and s <= bands[-1][1]:
            bands[-1] = (bands[-1][0], max(e, bands[-1][1]))
        elif s < e:
            bands.append((s, e))
        day += timedelta(days=1)

    return bands
