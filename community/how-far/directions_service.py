"""Directions Service - Asks Google Maps how far a destination is.

Builds the Directions API request on top of RetryingHttpClient and hands the
result to the route formatter. Falls back to a fixed apology when the API
never answered.
"""

import random

try:
    from .directions_models import DirectionsResult, FormattedResponse
    from .route_formatter import no_route_response, route_response
    from .skill_config import APOLOGY_MESSAGE, ASK_AGAIN_SUFFIX, MAPS_DIRECTIONS_PATH, HowFarSettings
except ImportError:
    from directions_models import DirectionsResult, FormattedResponse  # noqa: E402
    from route_formatter import no_route_response, route_response  # noqa: E402
    from skill_config import APOLOGY_MESSAGE, ASK_AGAIN_SUFFIX, MAPS_DIRECTIONS_PATH, HowFarSettings  # noqa: E402


class DirectionsService:
    """Driving directions gateway for the How Far ability."""

    def __init__(self, worker, http_client, settings: HowFarSettings, picker=None):
        """Initialize DirectionsService.

        Args:
            worker: AgentWorker for logging
            http_client: RetryingHttpClient
            settings: HowFarSettings (API key, retry policy, phrases)
            picker: Object with choice(options) for phrase selection
        """
        self.worker = worker
        self.http_client = http_client
        self.settings = settings
        self.picker = picker or random.Random()

    async def how_far(self, origin: str, destination: str) -> FormattedResponse:
        """Look up a driving route and phrase it for speech.

        Args:
            origin: Origin address or postal code
            destination: Destination address or postal code

        Returns:
            FormattedResponse with speech markup and plain display text
        """
        self.worker.editor_logging_handler.info(f"[HowFar] [{origin}] => [{destination}]")

        data = await self.http_client.get(
            self.settings.directions_policy,
            MAPS_DIRECTIONS_PATH,
            params={
                "origin": origin,
                "destination": destination,
                "mode": "driving",
                "alternatives": "false",
                "key": self.settings.maps_api_key,
            },
        )
        if data is None:
            return FormattedResponse.from_speech(APOLOGY_MESSAGE)

        leg = DirectionsResult.from_dict(data).first_leg()
        if leg is None:
            self.worker.editor_logging_handler.info(
                f"[HowFar] [{origin}] => [{destination}]: no route found"
            )
            speech = no_route_response(
                origin, destination, self.picker, self.settings.phrases
            )
        else:
            self.worker.editor_logging_handler.info(
                f"[HowFar] [{origin}] => [{destination}]: "
                f"[{leg.duration_text}]/[{leg.distance_text}]/[{len(leg.steps)} steps]"
            )
            speech = route_response(
                leg,
                origin,
                destination,
                self.picker,
                default_origin=self.settings.default_origin,
                hours_per_day=self.settings.driving_hours_per_day,
                phrases=self.settings.phrases,
            )

        return FormattedResponse.from_speech(speech + ASK_AGAIN_SUFFIX)
