"""Origin Service - Fills in the user's origin from the device location API."""

import re
from typing import Optional

try:
    from .skill_config import LOCATION_PATH, ORIGIN_ATTRIBUTE, HowFarSettings
except ImportError:
    from skill_config import LOCATION_PATH, ORIGIN_ATTRIBUTE, HowFarSettings  # noqa: E402

POSTAL_CODE = re.compile(r"^[0-9]+$")


class OriginService:
    """Resolves a session's origin at most once per session."""

    def __init__(self, worker, http_client, settings: HowFarSettings):
        self.worker = worker
        self.http_client = http_client
        self.settings = settings

    def get_origin(self, session) -> str:
        return session.get(ORIGIN_ATTRIBUTE) or self.settings.default_origin

    async def resolve_origin(
        self,
        session,
        consent_token: Optional[str] = None,
        device_id: Optional[str] = None,
    ):
        """Replace the default origin with the device's postal code if we can.

        A customized origin is kept for the rest of the session, so this only
        goes to the network while the origin is still the default.
        """
        if self.get_origin(session) != self.settings.default_origin:
            return

        if not consent_token:
            self.worker.editor_logging_handler.info(
                "[HowFar] Consent token not available, default origin is still "
                f"[{self.get_origin(session)}]"
            )
            return

        result = await self.http_client.get(
            self.settings.location_policy,
            LOCATION_PATH.format(device_id=device_id or ""),
            headers={"Authorization": f"Bearer {consent_token}"},
        )
        postal_code = result.get("postalCode") if isinstance(result, dict) else None
        if postal_code and POSTAL_CODE.match(str(postal_code)):
            session.set(ORIGIN_ATTRIBUTE, str(postal_code))
            self.worker.editor_logging_handler.info(
                f"[HowFar] Default origin is set to [{postal_code}] for [{device_id}]"
            )
        else:
            self.worker.editor_logging_handler.info(
                "[HowFar] Numeric postal code not available, default origin is still "
                f"[{self.get_origin(session)}]"
            )
