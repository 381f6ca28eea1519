from datetime import datetime
from typing import Iterable, List, Sequence, Tuple, Union

from foodmap.domain.models.store import BusinessHoursRule

DAYS_PER_WEEK = 7

Interval = Tuple[str, str]
WeekTable = List[List[Interval]]


def resolve(rules: Iterable[BusinessHoursRule]) -> WeekTable:
    """
    Expand weekly rules into one interval list per weekday, Monday first.

    Rules are applied in declaration order and only ever append: when two
    rules cover the same day both intervals stay in that day's list, unsorted
    and unmerged.
    """
    table: WeekTable = [[] for _ in range(DAYS_PER_WEEK)]
    for rule in rules:
        lo, hi = sorted((rule.from_day, rule.to_day))
        for day in range(lo, hi + 1):
            table[day - 1].append((rule.from_time, rule.to_time))
    return table


def _is_table(schedule: Sequence) -> bool:
    return len(schedule) == DAYS_PER_WEEK and all(isinstance(day, list) for day in schedule)


def is_open(schedule: Union[WeekTable, Iterable[BusinessHoursRule]], now: datetime) -> bool:
    """
    from_time <= now < to_time on now's weekday; intervals never wrap midnight.
    `schedule` is either a table from resolve() or the rules themselves.
    """
    schedule = list(schedule)
    table = schedule if _is_table(schedule) else resolve(schedule)
    clock = now.strftime("%H:%M")
    return any(start <= clock < end for start, end in table[now.isoweekday() - 1])
