"""Route Formatter - Turns Directions API data into spoken phrases.

Responsibilities:
- No-route phrasing
- Route phrasing (duration, distance, ferries, multi-day estimate)
- Address cleanup for display

Pure functions: no I/O. Random word choices go through a picker exposing
choice(options), so tests can pass a deterministic one.
"""

import math
import re
from typing import List, Optional

try:
    from .directions_models import RouteLeg, Step
    from .skill_config import DEFAULT_ORIGIN, DRIVING_HOURS_PER_DAY, PhraseBook
except ImportError:
    from directions_models import RouteLeg, Step  # noqa: E402
    from skill_config import DEFAULT_ORIGIN, DRIVING_HOURS_PER_DAY, PhraseBook  # noqa: E402

DEFAULT_PHRASES = PhraseBook()

DAYS_AND_HOURS = re.compile(r"(\d+)\s+days?\s+(\d+)\s+hours?")
DAYS_ONLY = re.compile(r"(\d+)\s+days?")
HOURS_ONLY = re.compile(r"(\d+)\s+hours?")
DECIMAL_NUMBER = re.compile(r"(\d+)\.\d+")
SHORT_TRIP = re.compile(r"\d+ mins?")


def say_address(text: str) -> str:
    return f'<say-as interpret-as="address">{text}</say-as>'


def normalize_duration(duration: str) -> str:
    """Drop the " 0 mins" / " 0 hours" the API leaves in, e.g. "4 hours 0 mins"."""
    return duration.replace(" 0 mins", "", 1).replace(" 0 hours", "", 1)


def normalize_distance(distance: str) -> str:
    """12.7 mi -> 12 mi"""
    return DECIMAL_NUMBER.sub(r"\1", distance)


def count_ferries(steps: List[Step]) -> int:
    return sum(1 for step in steps or [] if step.maneuver == "ferry")


def driving_days(duration: str, hours_per_day: int = DRIVING_HOURS_PER_DAY) -> int:
    """Estimate days of driving at hours_per_day, 0 if the trip is under an hour.

    "2 days 3 hours" -> ceil(51 / 8) = 7
    """
    is_days = "day" in duration
    is_hours = "hour" in duration
    if not (is_days or is_hours):
        return 0

    days = hours = 0
    if is_days and is_hours:
        match = DAYS_AND_HOURS.search(duration)
        if match:
            days, hours = int(match.group(1)), int(match.group(2))
    elif is_days:
        match = DAYS_ONLY.search(duration)
        if match:
            days = int(match.group(1))
    else:
        match = HOURS_ONLY.search(duration)
        if match:
            hours = int(match.group(1))

    if not match:
        return 0
    return math.ceil((days * 24 + hours) / hours_per_day)


def display_address(
    original: str, api_address: Optional[str], default_origin: str = DEFAULT_ORIGIN
) -> str:
    """Pick the address to read back to the user.

    Postal codes and the default origin are kept as given. Anything else is
    replaced by the first two parts of the address the API resolved, so
    "1 Main St, Springfield, IL 62701, USA" reads as "1 Main St, Springfield".
    """
    original = original or ""
    if original.isdigit() or original == default_origin or not api_address:
        return original
    parts = [part.strip() for part in api_address.split(",")]
    return ", ".join(parts[:2])


def is_short_trip(duration: str) -> bool:
    return bool(SHORT_TRIP.fullmatch(duration.strip()))


def needs_usage_hint(origin: str, destination: str) -> bool:
    # "Vegas to LAX" in a single slot means the platform split the request badly
    return " to " in (origin or "") or " to " in (destination or "")


def no_route_response(
    origin: str, destination: str, picker, phrases: PhraseBook = DEFAULT_PHRASES
) -> str:
    response = (
        f"{picker.choice(phrases.no_route_openers)}, "
        f"{picker.choice(phrases.no_route_hedges)} "
        f"{picker.choice(phrases.no_route_verdicts)}"
        f" to {say_address(destination)} from {say_address(origin)}."
    )
    if needs_usage_hint(origin, destination):
        response += phrases.usage_hint
    return response


def route_response(
    leg: RouteLeg,
    origin: str,
    destination: str,
    picker,
    default_origin: str = DEFAULT_ORIGIN,
    hours_per_day: int = DRIVING_HOURS_PER_DAY,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> str:
    shown_origin = display_address(origin, leg.start_address, default_origin)
    shown_destination = display_address(destination, leg.end_address, default_origin)
    duration = normalize_duration(leg.duration_text)
    distance = normalize_distance(leg.distance_text)
    ferries = count_ferries(leg.steps)
    days = driving_days(duration, hours_per_day)

    qualifier = ""
    if is_short_trip(duration):
        qualifier = picker.choice(phrases.short_trip_qualifiers) + " "

    ferry_clause = ""
    if ferries > 0:
        ferry_clause = f" and {ferries} {'ferry' if ferries == 1 else 'ferries'}"

    response = (
        f"{say_address(shown_destination)} is {qualifier}{duration}{ferry_clause}"
        f" away (or {distance}) from {say_address(shown_origin)}."
    )
    if days > 1:
        response += f' <break time="0.03s"/>That\'ll be about {days} days driving.'
    return response
