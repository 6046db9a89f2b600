"""Session key/value attributes that live for one conversation."""

from typing import Optional


class SessionAttributes:
    """Explicit get/set store for session-scoped attributes.

    The platform owns persistence; this object is handed to whatever needs to
    read or write an attribute instead of passing a raw dict around.
    """

    def __init__(self, attributes: Optional[dict] = None):
        self._attributes = dict(attributes or {})

    def get(self, key: str, default=None):
        return self._attributes.get(key, default)

    def set(self, key: str, value):
        self._attributes[key] = value

    def to_dict(self) -> dict:
        return dict(self._attributes)
