"""
Ritual recurrence matching.
Weekday numbering is 0=Sunday .. 6=Saturday throughout.
"""

import logging
from datetime import date
from typing import List

from spoonplan.errors import InvalidRule
from spoonplan.schemas.goal import Frequency, Goal, RitualRule

logger = logging.getLogger("spoonplan")


def weekday_index(day: date) -> int:
    return day.isoweekday() % 7


def days_since_jan1(day: date) -> int:
    return (day - date(day.year, 1, 1)).days


def is_even_week(day: date) -> bool:
    """
    Week parity counted from Jan 1 of the date's own year, not ISO weeks.
    Parity restarts every Jan 1, so biweekly rules can skip or repeat across New Year.
    """
    return (days_since_jan1(day) // 7) % 2 == 0


def check_rule(rule: RitualRule) -> None:
    """Raise InvalidRule if the field that matters for the rule's frequency is unusable."""
    if rule.frequency == Frequency.monthly:
        if rule.month_day is None:
            raise InvalidRule("monthly rule without month_day")
        if not 1 <= rule.month_day <= 31:
            raise InvalidRule(f"month_day {rule.month_day} outside 1..31")
        return
    if not rule.days:
        raise InvalidRule(f"{rule.frequency.value} rule without days")
    bad = [d for d in rule.days if not 0 <= d <= 6]
    if bad:
        raise InvalidRule(f"weekday values {bad} outside 0..6")


def applies_today(rule: RitualRule, day: date) -> bool:
    try:
        check_rule(rule)
    except InvalidRule as exc:
        logger.warning("invalid_ritual_rule", extra={"rule_id": rule.id, "reason": str(exc)})
        return False

    if rule.frequency == Frequency.monthly:
        # day 31 simply never matches in shorter months
        return day.day == rule.month_day
    if rule.frequency == Frequency.biweekly and not is_even_week(day):
        return False
    return weekday_index(day) in rule.days


def firing_rules(goal: Goal, day: date) -> List[RitualRule]:
    return [rule for rule in goal.rituals if applies_today(rule, day)]
