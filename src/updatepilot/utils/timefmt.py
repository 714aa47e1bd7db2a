"""Human readable time differences."""

from updatepilot.services.i18n import get_i18n_service

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY


def human_time_diff(start: float, end: float, lang: str = "en") -> str:
    """Describe the distance between two Unix timestamps, e.g. "2 hours".

    The order of the arguments does not matter. Each unit is rounded and at
    least 1, so a distance of 20 seconds still reads "20 seconds" and 40 minutes
    reads "40 mins".

    Args:
        start: First timestamp
        end: Second timestamp
        lang: Language code for the unit names

    Returns:
        Localized "<n> <unit>" phrase
    """
    diff = abs(int(end) - int(start))

    if diff < MINUTE:
        count, unit = max(diff, 1), "second"
    elif diff < HOUR:
        count, unit = max(round(diff / MINUTE), 1), "minute"
    elif diff < DAY:
        count, unit = max(round(diff / HOUR), 1), "hour"
    elif diff < WEEK:
        count, unit = max(round(diff / DAY), 1), "day"
    elif diff < MONTH:
        count, unit = max(round(diff / WEEK), 1), "week"
    elif diff < YEAR:
        count, unit = max(round(diff / MONTH), 1), "month"
    else:
        count, unit = max(round(diff / YEAR), 1), "year"

    form = "one" if count == 1 else "other"
    return get_i18n_service().translate(f"time.{unit}.{form}", lang=lang, count=count)
