from __future__ import annotations

from datetime import date, datetime, timedelta


def to_local(moment: datetime) -> datetime:
    """Return `moment` as a naive local wall-clock datetime."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def local_day(moment: datetime) -> date:
    """Calendar date of `moment` in local time."""
    return to_local(moment).date()


def start_of_week(moment: datetime) -> datetime:
    """Local midnight of the Sunday that opens the week containing `moment`."""
    day = local_day(moment)
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return datetime(sunday.year, sunday.month, sunday.day)


def start_of_month(moment: datetime) -> datetime:
    day = local_day(moment)
    return datetime(day.year, day.month, 1)


def add_month(moment: datetime) -> datetime:
    """Same day-of-month one calendar month later, clamped to the month's last day."""
    year = moment.year + moment.month // 12
    month = moment.month % 12 + 1
    day = moment.day
    while True:
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1
