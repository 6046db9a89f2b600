"""Configuration for the How Far ability.

Endpoints, retry policies, phrase sets and fixed messages live here as
immutable values. Components receive them at construction time.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

# =============================================================================
# ENDPOINTS
# =============================================================================

MAPS_ENDPOINT = "maps.googleapis.com"
MAPS_DIRECTIONS_PATH = "/maps/api/directions/json"
MAPS_ENDPOINT_TIMEOUT = 4000
MAPS_ENDPOINT_RETRIES = 3

LOCATION_ENDPOINT = "api.amazonalexa.com"
LOCATION_PATH = "/v1/devices/{device_id}/settings/address/countryAndPostalCode"
LOCATION_ENDPOINT_TIMEOUT = 2000
LOCATION_ENDPOINT_RETRIES = 3

# Delay between attempts: base + uniform(0, jitter)
RETRY_BASE_DELAY_MS = 250
RETRY_JITTER_MS = 100

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_ORIGIN = "Seattle, WA"
DEFAULT_DESTINATION = "Seattle, WA"
DRIVING_HOURS_PER_DAY = 8

METRICS_NAMESPACE = "HowFar"

# Session attribute holding the user's origin
ORIGIN_ATTRIBUTE = "defaultOrigin"

# =============================================================================
# MESSAGES
# =============================================================================

WAITING_FOR_INPUT = "Where would you like to go?"
WAITING_FOR_INPUT_DELAYED = ' <break time="0.5s"/> ' + WAITING_FOR_INPUT
ASK_AGAIN_SUFFIX = "\n\n" + WAITING_FOR_INPUT_DELAYED

APOLOGY_MESSAGE = "Oh dear, something went wrong."

USAGE_HINT = (
    ' <break time="0.3s"/>Try asking for one place at a time, '
    "for example <break time=\"0.1s\"/> how far is Vegas from LAX."
)

SAMPLE_PHRASES = (
    "Mexico City",
    "98006",
    "How far is Vegas from LAX ?",
)

WELCOME_MESSAGE = (
    'Welcome to "How Far" <break time="0.05s"/> telling how far your '
    "destination is in driving hours. "
    'You can say <break time="0.25s"/> <say-as interpret-as="address"> '
    + SAMPLE_PHRASES[0]
    + " </say-as>, "
    + '<break time="0.4s"/> <say-as interpret-as="address"> '
    + SAMPLE_PHRASES[1]
    + ' </say-as><break time="0.3s"/> '
    + 'Or <break time="0.3s"/> '
    + SAMPLE_PHRASES[2]
    + "."
)

WELCOME_CARD_CONTENT = "\n".join(SAMPLE_PHRASES) + "\n\n" + WAITING_FOR_INPUT

SESSION_ENDED_TITLE = "Session Ended"
SESSION_ENDED_CONTENT = "Bye-bye for now!"

COMPLY_PHRASES = ("Sure!", "OK!", "Done!", "Got it", "Done deal")

NO_ROUTE_OPENERS = ("Hmm", "Oh dear", "Oh")
NO_ROUTE_HEDGES = ("I'm afraid", "it looks like")
NO_ROUTE_VERDICTS = (
    "you can't drive",
    "there is no route",
    "there is no way",
    "there is no way to drive",
)

# Two thirds "only", one third "just"
SHORT_TRIP_QUALIFIERS = ("only", "only", "just")


# =============================================================================
# SETTINGS
# =============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Per-endpoint HTTP policy. max_retries counts attempts."""

    hostname: str
    timeout_millis: int
    max_retries: int


@dataclass(frozen=True)
class PhraseBook:
    no_route_openers: Tuple[str, ...] = NO_ROUTE_OPENERS
    no_route_hedges: Tuple[str, ...] = NO_ROUTE_HEDGES
    no_route_verdicts: Tuple[str, ...] = NO_ROUTE_VERDICTS
    short_trip_qualifiers: Tuple[str, ...] = SHORT_TRIP_QUALIFIERS
    comply: Tuple[str, ...] = COMPLY_PHRASES
    usage_hint: str = USAGE_HINT


def _int_env(environ, name: str, default: int) -> int:
    raw = environ.get(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class HowFarSettings:
    maps_api_key: str = ""
    directions_policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(
            MAPS_ENDPOINT, MAPS_ENDPOINT_TIMEOUT, MAPS_ENDPOINT_RETRIES
        )
    )
    location_policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(
            LOCATION_ENDPOINT, LOCATION_ENDPOINT_TIMEOUT, LOCATION_ENDPOINT_RETRIES
        )
    )
    default_origin: str = DEFAULT_ORIGIN
    default_destination: str = DEFAULT_DESTINATION
    driving_hours_per_day: int = DRIVING_HOURS_PER_DAY
    phrases: PhraseBook = field(default_factory=PhraseBook)
    cloudwatch_enabled: bool = False
    metrics_namespace: str = METRICS_NAMESPACE
    alert_topic_arn: Optional[str] = None
    aws_region: str = "us-east-1"

    @classmethod
    def from_env(cls, environ=None) -> "HowFarSettings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            maps_api_key=env.get("MAPS_API_KEY", ""),
            directions_policy=RetryPolicy(
                env.get("MAPS_API_HOST", MAPS_ENDPOINT),
                _int_env(env, "MAPS_API_TIMEOUT_MS", MAPS_ENDPOINT_TIMEOUT),
                _int_env(env, "MAPS_API_RETRIES", MAPS_ENDPOINT_RETRIES),
            ),
            location_policy=RetryPolicy(
                env.get("LOCATION_API_HOST", LOCATION_ENDPOINT),
                _int_env(env, "LOCATION_API_TIMEOUT_MS", LOCATION_ENDPOINT_TIMEOUT),
                _int_env(env, "LOCATION_API_RETRIES", LOCATION_ENDPOINT_RETRIES),
            ),
            default_origin=env.get("HOW_FAR_DEFAULT_ORIGIN", DEFAULT_ORIGIN),
            cloudwatch_enabled=env.get("HOW_FAR_CLOUDWATCH", "").lower()
            in ("1", "true", "yes"),
            metrics_namespace=env.get("HOW_FAR_METRICS_NAMESPACE", METRICS_NAMESPACE),
            alert_topic_arn=env.get("HOW_FAR_ALERT_TOPIC_ARN") or None,
            aws_region=env.get("AWS_REGION", "us-east-1"),
        )

    def with_prefs(self, prefs: dict) -> "HowFarSettings":
        """Overlay values the user saved in the ability's prefs file."""
        key = prefs.get("maps_api_key", "")
        if key and key != "YOUR_GOOGLE_MAPS_API_KEY":
            return replace(self, maps_api_key=key)
        return self
