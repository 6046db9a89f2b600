"""Intent Dispatcher - Routes intents to origin resolution and directions.

Responsibilities:
- Reading the inbound intent event (name, slots, ids, consent token)
- Mapping each intent to a response
- Building speech plus a markup-free card
"""

import random
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

try:
    from .directions_models import clear_tags
    from .route_formatter import say_address
    from .skill_config import (
        SESSION_ENDED_CONTENT,
        SESSION_ENDED_TITLE,
        WAITING_FOR_INPUT,
        WAITING_FOR_INPUT_DELAYED,
        WELCOME_CARD_CONTENT,
        WELCOME_MESSAGE,
        HowFarSettings,
    )
except ImportError:
    from directions_models import clear_tags  # noqa: E402
    from route_formatter import say_address  # noqa: E402
    from skill_config import (  # noqa: E402
        SESSION_ENDED_CONTENT,
        SESSION_ENDED_TITLE,
        WAITING_FOR_INPUT,
        WAITING_FOR_INPUT_DELAYED,
        WELCOME_CARD_CONTENT,
        WELCOME_MESSAGE,
        HowFarSettings,
    )

LAUNCH_REQUEST = "LaunchRequest"
INTENT_REQUEST = "IntentRequest"
SESSION_ENDED_REQUEST = "SessionEndedRequest"

HOW_FAR_INTENT = "HowFarIntent"
HELP_INTENT = "AMAZON.HelpIntent"
CANCEL_INTENT = "AMAZON.CancelIntent"
STOP_INTENT = "AMAZON.StopIntent"

# Destination is occasionally heard as "is <Destination>"
LEADING_IS = re.compile(r"^\s*is\s+")


@dataclass
class IntentEvent:
    request_type: str
    intent_name: Optional[str] = None
    slots: Dict[str, Optional[str]] = field(default_factory=dict)
    user_id: str = ""
    device_id: str = ""
    consent_token: Optional[str] = None

    @property
    def is_test_request(self) -> bool:
        return not (self.user_id and self.device_id)

    def slot(self, name: str, default: str) -> str:
        return self.slots.get(name) or default


@dataclass
class SkillResponse:
    speech: str
    card_title: str
    card_content: str
    reprompt: Optional[str] = None
    should_end_session: bool = False

    @property
    def display(self) -> str:
        return clear_tags(self.speech)


def tell_with_card(speech: str, card_title: str, card_content: str = None) -> SkillResponse:
    return SkillResponse(
        speech=speech,
        card_title=clear_tags(card_title),
        card_content=clear_tags(card_content or speech),
        should_end_session=True,
    )


def ask_with_card(
    speech: str, reprompt: str, card_title: str, card_content: str = None
) -> SkillResponse:
    return SkillResponse(
        speech=speech,
        card_title=clear_tags(card_title),
        card_content=clear_tags(card_content or speech),
        reprompt=reprompt,
        should_end_session=False,
    )


class IntentDispatcher:
    """Maps intents to OriginService / DirectionsService calls."""

    def __init__(
        self,
        worker,
        origin_service,
        directions_service,
        settings: HowFarSettings,
        picker=None,
    ):
        self.worker = worker
        self.origin_service = origin_service
        self.directions_service = directions_service
        self.settings = settings
        self.picker = picker or random.Random()

    async def dispatch(self, event: IntentEvent, session) -> SkillResponse:
        self._log_event(event)

        if event.request_type == LAUNCH_REQUEST:
            await self.origin_service.resolve_origin(
                session, event.consent_token, event.device_id
            )
            return self.welcome(session)

        if event.request_type == SESSION_ENDED_REQUEST or event.intent_name in (
            CANCEL_INTENT,
            STOP_INTENT,
        ):
            return self.goodbye()

        if event.intent_name == HOW_FAR_INTENT:
            return await self.how_far(event, session)

        return self.welcome(session)

    async def how_far(self, event: IntentEvent, session) -> SkillResponse:
        destination = LEADING_IS.sub(
            "", event.slot("Destination", self.settings.default_destination), count=1
        )
        await self.origin_service.resolve_origin(
            session, event.consent_token, event.device_id
        )
        origin = event.slot("Origin", self.origin_service.get_origin(session))

        response = await self.directions_service.how_far(origin, destination)
        return ask_with_card(
            response.speech,
            WAITING_FOR_INPUT,
            f"How Far is {destination} from {origin}?",
        )

    def welcome(self, session) -> SkillResponse:
        speech = (
            WELCOME_MESSAGE
            + ' <break time="0.3s"/> Your location is set to '
            + say_address(self.origin_service.get_origin(session))
            + ". "
            + WAITING_FOR_INPUT_DELAYED
        )
        return ask_with_card(speech, WAITING_FOR_INPUT, WAITING_FOR_INPUT, WELCOME_CARD_CONTENT)

    def goodbye(self) -> SkillResponse:
        return tell_with_card(
            self.picker.choice(self.settings.phrases.comply),
            SESSION_ENDED_TITLE,
            SESSION_ENDED_CONTENT,
        )

    def _log_event(self, event: IntentEvent):
        self.worker.editor_logging_handler.info(
            f"[HowFar] ------- [{event.request_type}][{event.intent_name or ''}]"
            f"{'[TEST]' if event.is_test_request else ''} -------"
        )
        self.worker.editor_logging_handler.info(
            f"[HowFar] User: {event.user_id} Device: {event.device_id} Slots: {event.slots}"
        )
