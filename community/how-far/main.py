import json
import re
from typing import Optional

from src.agent.capability import MatchingCapability
from src.agent.capability_worker import CapabilityWorker
from src.main import AgentWorker

# Service imports - relative for OpenHome runtime, absolute fallback for local tests
try:
    from .directions_service import DirectionsService
    from .http_client import RetryingHttpClient
    from .intent_dispatcher import (
        HELP_INTENT,
        HOW_FAR_INTENT,
        INTENT_REQUEST,
        LAUNCH_REQUEST,
        SESSION_ENDED_REQUEST,
        STOP_INTENT,
        IntentDispatcher,
        IntentEvent,
    )
    from .metrics_service import build_metrics_service
    from .origin_service import OriginService
    from .session_store import SessionAttributes
    from .skill_config import HowFarSettings
except ImportError:
    from directions_service import DirectionsService  # noqa: E402
    from http_client import RetryingHttpClient  # noqa: E402
    from intent_dispatcher import (  # noqa: E402
        HELP_INTENT,
        HOW_FAR_INTENT,
        INTENT_REQUEST,
        LAUNCH_REQUEST,
        SESSION_ENDED_REQUEST,
        STOP_INTENT,
        IntentDispatcher,
        IntentEvent,
    )
    from metrics_service import build_metrics_service  # noqa: E402
    from origin_service import OriginService  # noqa: E402
    from session_store import SessionAttributes  # noqa: E402
    from skill_config import HowFarSettings  # noqa: E402

# =============================================================================
# HOW FAR
# Voice-powered "how far is X from Y" in driving hours, using the Google Maps
# Directions API. BYOK pattern (user provides their own Google Maps API key
# in the prefs file or the MAPS_API_KEY environment variable).
#
# Intents:
#   - HowFarIntent      - "How far is Vegas from LAX?"
#   - AMAZON.HelpIntent - "What can I say?"
#   - AMAZON.StopIntent - "Stop", "I'm done"
# =============================================================================

PREFS_FILE = "how_far_prefs.json"

EXIT_WORDS = {
    "stop", "exit", "quit", "done", "cancel", "bye", "goodbye",
    "nothing else", "no thanks", "that's it", "that's all",
}

CLASSIFY_PROMPT = (
    "Classify this voice command for a driving distance assistant. "
    "Return ONLY valid JSON. No markdown fences.\n"
    '{{\n'
    '  "intent": "how_far|help|stop",\n'
    '  "origin": "<string or null>",\n'
    '  "destination": "<string or null>"\n'
    '}}\n\n'
    "Rules:\n"
    '- "how far is Vegas from LAX" -> how_far, origin="LAX", destination="Vegas"\n'
    '- "Mexico City" -> how_far, origin=null, destination="Mexico City"\n'
    '- "98006" -> how_far, origin=null, destination="98006"\n'
    '- "what can I say" -> help\n'
    '- "never mind" -> stop\n'
    "- Keep place names exactly as spoken; do not add countries or states.\n\n"
    "User said: {user_input}"
)

INTENT_NAMES = {
    "how_far": HOW_FAR_INTENT,
    "help": HELP_INTENT,
    "stop": STOP_INTENT,
}


def _strip_json_fences(text: str) -> str:
    """Strip markdown code fences from LLM output (e.g. ```json ... ```)."""
    return (text or "").replace("```json", "").replace("```", "").strip()


class HowFarCapability(MatchingCapability):
    worker: AgentWorker = None
    capability_worker: CapabilityWorker = None
    prefs: dict = None
    settings: HowFarSettings = None
    session: SessionAttributes = None
    dispatcher: IntentDispatcher = None

    # {{register capability}}  # noqa: E265

    def call(self, worker: AgentWorker):
        self.worker = worker
        self.capability_worker = CapabilityWorker(self.worker)
        self.worker.session_tasks.create(self.run())

    async def run(self):
        try:
            self.prefs = await self.load_prefs()
            self.settings = HowFarSettings.from_env().with_prefs(self.prefs)

            if not self.settings.maps_api_key:
                await self.capability_worker.speak(
                    "I need a Google Maps API key to work out distances. "
                    "Add it in your settings and try again."
                )
                return

            self.session = SessionAttributes()
            self.dispatcher = self.build_dispatcher()

            # "How far is X from Y" may already be in the trigger phrase
            event = self.classify(self.get_trigger_context())
            if event.intent_name != HOW_FAR_INTENT:
                event = self.make_event(LAUNCH_REQUEST)

            response = await self.respond(event)
            while not response.should_end_session:
                user_input = await self.capability_worker.user_response()
                if not user_input or not user_input.strip():
                    response = await self.respond(self.make_event(SESSION_ENDED_REQUEST))
                    break
                if self._is_exit(user_input):
                    response = await self.respond(self.make_event(INTENT_REQUEST, STOP_INTENT))
                    break
                response = await self.respond(self.classify(user_input))

        except Exception as e:
            self._log("error", f"Unexpected error: {e}")
            await self.capability_worker.speak(
                "Something went wrong while checking that distance. Try again."
            )
        finally:
            self.capability_worker.resume_normal_flow()

    def build_dispatcher(self) -> IntentDispatcher:
        metrics = build_metrics_service(self.worker, self.settings)
        http_client = RetryingHttpClient(
            self.worker, metrics, sleep=self.worker.session_tasks.sleep
        )
        return IntentDispatcher(
            self.worker,
            OriginService(self.worker, http_client, self.settings),
            DirectionsService(self.worker, http_client, self.settings),
            self.settings,
        )

    async def respond(self, event: IntentEvent):
        response = await self.dispatcher.dispatch(event, self.session)
        self._log("info", f"Card: [{response.card_title}][{response.card_content}]")
        await self.capability_worker.speak(response.display)
        return response

    # ------------------------------------------------------------------
    # Intent events
    # ------------------------------------------------------------------

    def make_event(
        self, request_type: str, intent_name: Optional[str] = None, slots: dict = None
    ) -> IntentEvent:
        return IntentEvent(
            request_type=request_type,
            intent_name=intent_name,
            slots=slots or {},
            user_id=self.prefs.get("user_id", ""),
            device_id=self.prefs.get("device_id", ""),
            consent_token=self.prefs.get("location_consent_token") or None,
        )

    def classify(self, user_input: str) -> IntentEvent:
        """Let the platform LLM pull the intent and slots out of the utterance."""
        if not user_input or not user_input.strip():
            return self.make_event(INTENT_REQUEST, HELP_INTENT)
        raw = self.capability_worker.text_to_text_response(
            CLASSIFY_PROMPT.format(user_input=user_input)
        )
        parsed = self._parse_json(raw)
        intent_name = INTENT_NAMES.get(parsed.get("intent"), HELP_INTENT)
        slots = {
            "Origin": parsed.get("origin") or None,
            "Destination": parsed.get("destination") or None,
        }
        return self.make_event(INTENT_REQUEST, intent_name, slots)

    def get_trigger_context(self) -> str:
        try:
            history = self.worker.agent_memory.full_message_history
            if not history:
                return ""
            for msg in reversed(history):
                if isinstance(msg, dict):
                    role, content = msg.get("role"), msg.get("content")
                else:
                    role = getattr(msg, "role", None)
                    content = getattr(msg, "content", None)
                if role == "user" and content:
                    return content
            return ""
        except Exception:
            return ""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_json(self, raw: str) -> dict:
        """Parse JSON from LLM response, stripping markdown fences."""
        if not raw:
            return {}
        try:
            parsed = json.loads(_strip_json_fences(raw))
        except (json.JSONDecodeError, ValueError):
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def _is_exit(self, text: str) -> bool:
        if not text:
            return False
        lower = re.sub(r"[^\w\s']", "", text.lower().strip())
        words = lower.split()
        # Whole words only, so "Dundee" or "Stoptown" are still destinations
        return any(
            (phrase in lower) if " " in phrase else (phrase in words)
            for phrase in EXIT_WORDS
        )

    def _log(self, level: str, message: str):
        handler = self.worker.editor_logging_handler
        if level == "error":
            handler.error(f"[HowFar] {message}")
        elif level == "warning":
            handler.warning(f"[HowFar] {message}")
        else:
            handler.info(f"[HowFar] {message}")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def load_prefs(self) -> dict:
        if await self.capability_worker.check_if_file_exists(PREFS_FILE, False):
            try:
                raw = await self.capability_worker.read_file(PREFS_FILE, False)
                return json.loads(raw)
            except json.JSONDecodeError:
                self._log("error", "Corrupt prefs file, resetting.")
                await self.capability_worker.delete_file(PREFS_FILE, False)
        return {}
