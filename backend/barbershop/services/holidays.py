# backend/barbershop/services/holidays.py
"""
Public holiday calendar for the German federal states.

Pure functions, no I/O. Results are memoized per (region, year) so the
resolver can ask "is this a holiday" for every date of a calendar view
without recomputing Easter each time.
"""

from datetime import date, timedelta
from functools import lru_cache

from ..errors import UnsupportedRegion

REGIONS: dict[str, str] = {
    "BW": "Baden-Württemberg",
    "BY": "Bayern",
    "BE": "Berlin",
    "BB": "Brandenburg",
    "HB": "Bremen",
    "HH": "Hamburg",
    "HE": "Hessen",
    "MV": "Mecklenburg-Vorpommern",
    "NI": "Niedersachsen",
    "NW": "Nordrhein-Westfalen",
    "RP": "Rheinland-Pfalz",
    "SL": "Saarland",
    "SN": "Sachsen",
    "ST": "Sachsen-Anhalt",
    "SH": "Schleswig-Holstein",
    "TH": "Thüringen",
}

# Regional holidays → states observing them
_EPIPHANY = {"BW", "BY", "ST"}
_WOMENS_DAY = {"BE", "MV"}
_CORPUS_CHRISTI = {"BW", "BY", "HE", "NW", "RP", "SL"}
_ASSUMPTION = {"BY", "SL"}
_CHILDRENS_DAY = {"TH"}
_REFORMATION_DAY = {"BB", "HB", "HH", "MV", "NI", "SN", "ST", "SH", "TH"}
_ALL_SAINTS = {"BW", "BY", "NW", "RP", "SL"}
_REPENTANCE_DAY = {"SN"}


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (Gauss / Meeus formula)."""
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def _repentance_day(year: int) -> date:
    """
    Buß- und Bettag: the last Wednesday strictly before 23 November.

    When 23 November is itself a Wednesday the holiday falls on the 16th,
    which is the statutory date. Do not change this to return the 23rd.
    """
    nov22 = date(year, 11, 22)
    return nov22 - timedelta(days=(nov22.weekday() - 2) % 7)


def _check_region(region: str) -> str:
    code = (region or "").upper()
    if code not in REGIONS:
        raise UnsupportedRegion(region)
    return code


@lru_cache(maxsize=256)
def _compute(region: str, year: int) -> tuple[tuple[date, str], ...]:
    easter = easter_sunday(year)
    days: dict[date, str] = {
        date(year, 1, 1): "Neujahr",
        easter - timedelta(days=2): "Karfreitag",
        easter + timedelta(days=1): "Ostermontag",
        date(year, 5, 1): "Tag der Arbeit",
        easter + timedelta(days=39): "Christi Himmelfahrt",
        easter + timedelta(days=50): "Pfingstmontag",
        date(year, 10, 3): "Tag der Deutschen Einheit",
        date(year, 12, 25): "1. Weihnachtstag",
        date(year, 12, 26): "2. Weihnachtstag",
    }

    if region in _EPIPHANY:
        days[date(year, 1, 6)] = "Heilige Drei Könige"
    if region in _WOMENS_DAY:
        days[date(year, 3, 8)] = "Internationaler Frauentag"
    if region in _CORPUS_CHRISTI:
        days[easter + timedelta(days=60)] = "Fronleichnam"
    if region in _ASSUMPTION:
        days[date(year, 8, 15)] = "Mariä Himmelfahrt"
    if region in _CHILDRENS_DAY:
        days[date(year, 9, 20)] = "Weltkindertag"
    if region in _REFORMATION_DAY:
        days[date(year, 10, 31)] = "Reformationstag"
    if region in _ALL_SAINTS:
        days[date(year, 11, 1)] = "Allerheiligen"
    if region in _REPENTANCE_DAY:
        days[_repentance_day(year)] = "Buß- und Bettag"

    return tuple(sorted(days.items()))


def get_holidays(region: str, year: int) -> dict[date, str]:
    """
    All statutory public holidays of a region in a year.

    Raises:
        UnsupportedRegion: region is not one of REGIONS.
    """
    return dict(_compute(_check_region(region), year))


def holiday_dates(region: str, year: int) -> set[date]:
    return {day for day, _ in _compute(_check_region(region), year)}


def is_holiday(day: date, region: str) -> bool:
    return day in holiday_dates(region, day.year)


def holiday_name(day: date, region: str) -> str | None:
    return get_holidays(region, day.year).get(day)


def list_holidays(region: str, year: int, for_display: bool = False) -> list[tuple[date, str]]:
    """
    Sorted (date, name) pairs for the admin calendar.

    for_display adds Easter and Whit Sunday, which are not statutory
    holidays (they fall on Sundays) but are shown in the calendar.
    """
    days = get_holidays(region, year)
    if for_display:
        easter = easter_sunday(year)
        days[easter] = "Ostersonntag"
        days[easter + timedelta(days=49)] = "Pfingstsonntag"
    return sorted(days.items())


def count_working_days(start: date, end: date, region: str) -> int:
    """Count Monday–Saturday days in [start, end] that are not holidays."""
    if end < start:
        return 0

    holidays: set[date] = set()
    for year in range(start.year, end.year + 1):
        holidays |= holiday_dates(region, year)

    count = 0
    current = start
    while current <= end:
        if current.weekday() != 6 and current not in holidays:
            count += 1
        current += timedelta(days=1)
    return count
