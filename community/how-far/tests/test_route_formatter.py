"""Tests for route phrasing: durations, distances, ferries, addresses."""

import itertools
import random

import pytest

from conftest import FirstChoice
from directions_models import RouteLeg, Step
from route_formatter import (
    count_ferries,
    display_address,
    driving_days,
    is_short_trip,
    no_route_response,
    normalize_distance,
    normalize_duration,
    route_response,
    say_address,
)
from skill_config import NO_ROUTE_HEDGES, NO_ROUTE_OPENERS, NO_ROUTE_VERDICTS, USAGE_HINT


def make_leg(duration="2 hours 50 mins", distance="140.3 mi", start="", end="", maneuvers=()):
    return RouteLeg(
        duration_text=duration,
        distance_text=distance,
        start_address=start,
        end_address=end,
        steps=[Step(maneuver=m) for m in maneuvers],
    )


class TestDrivingDays:
    @pytest.mark.parametrize(
        "duration,expected",
        [
            ("2 days 3 hours", 7),
            ("1 day 10 hours", 5),
            ("1 day 1 hour", 4),
            ("3 days", 9),
            ("1 day", 3),
            ("9 hours 5 mins", 2),
            ("8 hours", 1),
            ("2 hours 50 mins", 1),
        ],
    )
    def test_days_from_duration(self, duration, expected):
        assert driving_days(duration) == expected

    @pytest.mark.parametrize("duration", ["45 mins", "1 min", "NoDuration", ""])
    def test_no_day_or_hour_is_zero(self, duration):
        assert driving_days(duration) == 0

    def test_custom_hours_per_day(self):
        assert driving_days("1 day", hours_per_day=12) == 2


class TestNormalization:
    def test_duration_drops_zero_minutes(self):
        assert normalize_duration("4 hours 0 mins") == "4 hours"

    def test_duration_drops_zero_hours(self):
        assert normalize_duration("1 day 0 hours") == "1 day"

    def test_duration_keeps_ten_minutes(self):
        assert normalize_duration("4 hours 10 mins") == "4 hours 10 mins"

    def test_distance_truncates_decimals(self):
        assert normalize_distance("140.3 mi") == "140 mi"
        assert normalize_distance("1,204.9 km") == "1,204 km"

    def test_distance_is_idempotent(self):
        once = normalize_distance("12.7 mi")
        assert normalize_distance(once) == once
        assert normalize_distance("300 mi") == "300 mi"


class TestFerriesAndAddresses:
    def test_count_ferries(self):
        steps = [Step("ferry"), Step(None), Step("turn-left"), Step("ferry")]
        assert count_ferries(steps) == 2
        assert count_ferries([]) == 0

    def test_postal_code_kept(self):
        assert display_address("98006", "Bellevue, WA 98006, USA") == "98006"

    def test_default_origin_kept(self):
        assert display_address("Seattle, WA", "Seattle, WA, USA") == "Seattle, WA"

    def test_other_address_truncated_to_two_parts(self):
        assert (
            display_address("space needle", "400 Broad St, Seattle, WA 98109, USA")
            == "400 Broad St, Seattle"
        )

    def test_missing_api_address_keeps_original(self):
        assert display_address("Vegas", "") == "Vegas"

    @pytest.mark.parametrize("duration", ["5 mins", "1 min", "45 mins"])
    def test_short_trip(self, duration):
        assert is_short_trip(duration)

    @pytest.mark.parametrize("duration", ["1 hour 5 mins", "2 hours", "about 5 mins"])
    def test_not_short_trip(self, duration):
        assert not is_short_trip(duration)


class TestNoRouteResponse:
    def test_any_combination_of_phrases(self):
        speech = no_route_response("Seattle, WA", "Honolulu", random.Random())
        openings = {
            f"{a}, {b} {c} to "
            for a, b, c in itertools.product(
                NO_ROUTE_OPENERS, NO_ROUTE_HEDGES, NO_ROUTE_VERDICTS
            )
        }
        assert any(speech.startswith(opening) for opening in openings)
        assert say_address("Honolulu") in speech
        assert say_address("Seattle, WA") in speech
        assert USAGE_HINT not in speech

    def test_exact_text_with_stub_picker(self):
        speech = no_route_response("Seattle, WA", "Honolulu", FirstChoice())
        assert speech == (
            'Hmm, I\'m afraid you can\'t drive to <say-as interpret-as="address">Honolulu'
            '</say-as> from <say-as interpret-as="address">Seattle, WA</say-as>.'
        )

    def test_usage_hint_when_slot_holds_two_places(self):
        speech = no_route_response("Seattle, WA", "Vegas to LAX", FirstChoice())
        assert speech.endswith(USAGE_HINT)


class TestRouteResponse:
    def test_basic_route(self):
        leg = make_leg(start="Seattle, WA, USA", end="Vancouver, BC, Canada")
        speech = route_response(leg, "Seattle, WA", "Vancouver, BC", FirstChoice())
        assert speech == (
            '<say-as interpret-as="address">Vancouver, BC</say-as> is 2 hours 50 mins'
            ' away (or 140 mi) from <say-as interpret-as="address">Seattle, WA</say-as>.'
        )

    def test_short_trip_gets_qualifier(self):
        leg = make_leg(duration="12 mins", distance="5.2 mi")
        speech = route_response(leg, "98006", "98008", random.Random())
        assert " is only 12 mins " in speech or " is just 12 mins " in speech

    def test_one_ferry(self):
        leg = make_leg(duration="3 hours 5 mins", maneuvers=("ferry", "turn-left"))
        speech = route_response(leg, "98006", "98250", FirstChoice())
        assert "3 hours 5 mins and 1 ferry away" in speech

    def test_two_ferries(self):
        leg = make_leg(maneuvers=("ferry", "ferry"))
        speech = route_response(leg, "98006", "98250", FirstChoice())
        assert "and 2 ferries away" in speech

    def test_no_ferry_clause_without_ferries(self):
        speech = route_response(make_leg(), "98006", "98250", FirstChoice())
        assert "ferr" not in speech

    def test_multi_day_sentence(self):
        leg = make_leg(duration="1 day 10 hours", distance="2,100.4 mi")
        speech = route_response(leg, "Seattle, WA", "98006", FirstChoice())
        assert "That'll be about 5 days driving." in speech
        assert "(or 2,100 mi)" in speech

    def test_single_day_has_no_multi_day_sentence(self):
        leg = make_leg(duration="7 hours 30 mins")
        speech = route_response(leg, "Seattle, WA", "98006", FirstChoice())
        assert "days driving" not in speech

    def test_zero_minutes_artifact_removed(self):
        leg = make_leg(duration="4 hours 0 mins")
        speech = route_response(leg, "98006", "98008", FirstChoice())
        assert " is 4 hours away" in speech
