"""Expiration date extraction from product label OCR text.

Label text is scanned with two tiers of pattern rules.  Keyword-labelled
dates (``EXP``, ``BEST BY``, ``USE BY`` ...) form the first tier; bare
date-shaped strings form the second and are only consulted when nothing in the
first tier parses.  Every match of every rule in a tier becomes a candidate and
the best candidate is picked relative to ``today``.
"""
from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional, Sequence

Confidence = Literal["high", "medium", "low"]

CONFIDENCE_RANK: Dict[str, int] = {"high": 0, "medium": 1, "low": 2}

MONTH_NAMES: Dict[str, int] = {
    "jan": 1,
    "january": 1,
    "feb": 2,
    "february": 2,
    "mar": 3,
    "march": 3,
    "apr": 4,
    "april": 4,
    "may": 5,
    "jun": 6,
    "june": 6,
    "jul": 7,
    "july": 7,
    "aug": 8,
    "august": 8,
    "sep": 9,
    "sept": 9,
    "september": 9,
    "oct": 10,
    "october": 10,
    "nov": 11,
    "november": 11,
    "dec": 12,
    "december": 12,
}

_KEYWORD = (
    r"(?:EXP(?:IR(?:ES?|Y|ATION))?"
    r"|BEST\s*(?:BY|BEFORE|IF\s*USED\s*BY)"
    r"|USE\s*BY"
    r"|BB"
    r"|SELL\s*BY)"
)

# Two-digit years at or below this pivot belong to the 2000s.
_TWO_DIGIT_YEAR_PIVOT = 50


@dataclass(frozen=True)
class ParsedDate:
    date: dt.date
    confidence: Confidence
    raw_match: str


@dataclass(frozen=True)
class PatternRule:
    """A date-shaped pattern, how to read its groups, and how far to trust it."""

    pattern: "re.Pattern[str]"
    parse: Callable[["re.Match[str]"], Optional[dt.date]]
    confidence: Confidence


def _normalise_year(raw: str) -> int:
    year = int(raw)
    if len(raw) == 2:
        return 2000 + year if year <= _TWO_DIGIT_YEAR_PIVOT else 1900 + year
    return year


def _calendar_date(year: int, month: int, day: int) -> Optional[dt.date]:
    """Build a date only when the fields are self-consistent.

    ``datetime.date`` refuses out-of-range fields instead of rolling them
    over, so Feb 30 is rejected rather than becoming Mar 2.  Years below 100
    are rejected as well since they never come from a real label.
    """

    if year < 100:
        return None
    try:
        value = dt.date(year, month, day)
    except ValueError:
        return None
    if (value.year, value.month, value.day) != (year, month, day):
        return None
    return value


def _numeric_date(first: str, second: str, year_raw: str) -> Optional[dt.date]:
    year = _normalise_year(year_raw)
    a = int(first)
    b = int(second)

    # US order (month first) wins whenever it is a real date.
    if 1 <= a <= 12 and 1 <= b <= 31:
        value = _calendar_date(year, a, b)
        if value is not None:
            return value

    if 1 <= b <= 12 and 1 <= a <= 31:
        return _calendar_date(year, b, a)

    return None


def _month_name_date(month_raw: str, day_raw: str, year_raw: str) -> Optional[dt.date]:
    month = MONTH_NAMES.get(month_raw.lower())
    if month is None:
        return None
    day = int(day_raw)
    if not 1 <= day <= 31:
        return None
    return _calendar_date(_normalise_year(year_raw), month, day)


def _iso_date(year_raw: str, month_raw: str, day_raw: str) -> Optional[dt.date]:
    month = int(month_raw)
    day = int(day_raw)
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return _calendar_date(int(year_raw), month, day)


def _parse_numeric(match: "re.Match[str]") -> Optional[dt.date]:
    return _numeric_date(match.group(1), match.group(2), match.group(3))


def _parse_month_day_year(match: "re.Match[str]") -> Optional[dt.date]:
    return _month_name_date(match.group(1), match.group(2), match.group(3))


def _parse_day_month_year(match: "re.Match[str]") -> Optional[dt.date]:
    return _month_name_date(match.group(2), match.group(1), match.group(3))


def _parse_iso(match: "re.Match[str]") -> Optional[dt.date]:
    return _iso_date(match.group(1), match.group(2), match.group(3))


def _rule(regex: str, parse: Callable[["re.Match[str]"], Optional[dt.date]], confidence: Confidence) -> PatternRule:
    return PatternRule(pattern=re.compile(regex, re.IGNORECASE | re.ASCII), parse=parse, confidence=confidence)


LABELED_RULES: Sequence[PatternRule] = (
    # EXP 01/25/27, BEST BY 01-25-2027, USE BY: 01/25/2027, SELL BY 01.25.27
    _rule(_KEYWORD + r"[:\s./]*(\d{1,2})[/\-.\s](\d{1,2})[/\-.\s](\d{2,4})", _parse_numeric, "high"),
    # EXP JAN 25 2027, BEST BY JAN 25, 2027
    _rule(_KEYWORD + r"[:\s]*([A-Z]{3,9})[\s.,]*(\d{1,2})[\s,]*(\d{2,4})", _parse_month_day_year, "high"),
    # EXP 25 JAN 2027
    _rule(_KEYWORD + r"[:\s]*(\d{1,2})[\s.,]*([A-Z]{3,9})[\s.,]*(\d{2,4})", _parse_day_month_year, "high"),
    # EXP 2027-01-25
    _rule(_KEYWORD + r"[:\s]*(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})", _parse_iso, "high"),
)

STANDALONE_RULES: Sequence[PatternRule] = (
    _rule(r"\b(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})\b", _parse_iso, "medium"),
    _rule(r"\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})\b", _parse_numeric, "low"),
    _rule(r"\b([A-Z]{3,9})[\s.,]+(\d{1,2})[\s,]+(\d{2,4})\b", _parse_month_day_year, "medium"),
    _rule(r"\b(\d{1,2})[\s.,]+([A-Z]{3,9})[\s.,]+(\d{2,4})\b", _parse_day_month_year, "medium"),
)

RULE_TIERS: Sequence[Sequence[PatternRule]] = (LABELED_RULES, STANDALONE_RULES)


def _scan(text: str, rules: Sequence[PatternRule]) -> List[ParsedDate]:
    candidates: List[ParsedDate] = []
    for rule in rules:
        for match in rule.pattern.finditer(text):
            value = rule.parse(match)
            if value is None:
                continue
            candidates.append(ParsedDate(date=value, confidence=rule.confidence, raw_match=match.group(0)))
    return candidates


def select_best_candidate(candidates: Sequence[ParsedDate], today: dt.date) -> Optional[ParsedDate]:
    """Pick the most plausible expiration date relative to ``today``.

    Dates on or after ``today`` win over past ones.  Among those, higher
    confidence wins and then the soonest date.  When every candidate is in the
    past the most recent one is returned.  Sorting is stable, so exact ties
    keep scan order.
    """

    upcoming = [candidate for candidate in candidates if candidate.date >= today]
    if upcoming:
        upcoming.sort(key=lambda item: (CONFIDENCE_RANK[item.confidence], item.date))
        return upcoming[0]

    past = [candidate for candidate in candidates if candidate.date < today]
    if past:
        past.sort(key=lambda item: item.date, reverse=True)
        return past[0]

    return None


def extract_expiration_date(text: str, today: Optional[dt.date] = None) -> Optional[ParsedDate]:
    """Return the most plausible expiration date found in ``text``.

    ``today`` pins the current calendar day; it is read from the clock on each
    call when omitted.  Text with no parseable date yields ``None``.
    """

    if not text:
        return None
    for rules in RULE_TIERS:
        candidates = _scan(text, rules)
        if candidates:
            return select_best_candidate(candidates, today or dt.date.today())
    return None


__all__ = [
    "CONFIDENCE_RANK",
    "Confidence",
    "LABELED_RULES",
    "MONTH_NAMES",
    "ParsedDate",
    "PatternRule",
    "RULE_TIERS",
    "STANDALONE_RULES",
    "extract_expiration_date",
    "select_best_candidate",
]
