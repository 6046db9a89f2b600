# Standardized data structures for directions results and spoken responses.

import re
from dataclasses import dataclass, field
from typing import List, Optional

TAG_PATTERN = re.compile(r"<[^>]+>")


def clear_tags(text: Optional[str]) -> str:
    """Strip speech markup tags, leaving plain text."""
    return TAG_PATTERN.sub("", text or "")


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _as_text(value) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class Step:
    """One step of a leg. Only the maneuver matters (ferry detection)."""
    maneuver: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Step":
        return cls(maneuver=_as_text(_as_dict(data).get("maneuver")) or None)


@dataclass
class RouteLeg:
    """An origin-to-destination segment of a computed route."""
    duration_text: str
    distance_text: str
    start_address: str = ""
    end_address: str = ""
    steps: List[Step] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RouteLeg":
        duration = _as_dict(data.get("duration"))
        distance = _as_dict(data.get("distance"))
        return cls(
            duration_text=_as_text(duration.get("text")) or "NoDuration",
            distance_text=_as_text(distance.get("text")) or "NoDistance",
            start_address=_as_text(data.get("start_address")),
            end_address=_as_text(data.get("end_address")),
            steps=[Step.from_dict(s) for s in _as_list(data.get("steps"))],
        )


@dataclass
class DirectionsResult:
    """Parsed Directions API body. Only the first leg of the first route is used.

    Routes, legs or fields of the wrong JSON type are treated as absent, so a
    body of unexpected shape reads as "no route" rather than raising.
    """
    routes: List[List[RouteLeg]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "DirectionsResult":
        routes = []
        for route in _as_list(_as_dict(data).get("routes")):
            legs = [
                RouteLeg.from_dict(leg)
                for leg in _as_list(_as_dict(route).get("legs"))
                if isinstance(leg, dict)
            ]
            routes.append(legs)
        return cls(routes=routes)

    def first_leg(self) -> Optional[RouteLeg]:
        if self.routes and self.routes[0]:
            return self.routes[0][0]
        return None


@dataclass
class FormattedResponse:
    """Speech (may carry markup) plus the plain display text derived from it."""
    speech: str
    display: str

    @classmethod
    def from_speech(cls, speech: str) -> "FormattedResponse":
        return cls(speech=speech, display=clear_tags(speech))
