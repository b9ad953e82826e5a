import datetime as dt

import pandas as pd

from plan_models import StudyDate

MAX_SCAN_DAYS = 100


def calculate_study_dates(
    total_days: int,
    preferred_days,
    start_date: dt.date | None = None,
) -> list[StudyDate]:
    """
    Map a requested number of study days onto real calendar dates.

    Walks forward one day at a time from start_date (inclusive, default today)
    and keeps each date whose weekday name is in preferred_days, until
    total_days dates are collected.

    The walk never looks further than MAX_SCAN_DAYS calendar days ahead, so an
    allow-list that can never be satisfied (e.g. empty) yields a shorter list
    instead of looping forever. Callers should warn on a shortfall, not fail.
    """
    if total_days <= 0:
        return []
    allowed = set(preferred_days or ())
    if not allowed:
        return []

    start = pd.Timestamp(start_date or dt.date.today()).normalize()
    window = pd.date_range(start=start, periods=MAX_SCAN_DAYS, freq="D")
    matches = window[window.day_name().isin(allowed)][:total_days]

    return [
        StudyDate(
            iso_date=ts.strftime("%Y-%m-%d"),
            weekday_name=ts.day_name(),
            ordinal=idx,
        )
        for idx, ts in enumerate(matches, start=1)
    ]
