"""Shared test fixtures for How Far tests."""

import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ability modules are imported as top-level modules, as on the OpenHome runtime
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from skill_config import HowFarSettings, RetryPolicy  # noqa: E402

MAPS_URL = "https://maps.googleapis.com/maps/api/directions/json"
LOCATION_URL = (
    "https://api.amazonalexa.com/v1/devices/device-1/settings/address/countryAndPostalCode"
)


class FirstChoice:
    """Deterministic picker: always the first option, no jitter."""

    def choice(self, options):
        return options[0]

    def uniform(self, a, b):
        return a


# Mock the OpenHome src modules before importing main
@pytest.fixture(scope="session", autouse=True)
def mock_src_modules():
    """Mock the src.agent modules that aren't available in test environment."""
    mock_capability = MagicMock()
    mock_capability.MatchingCapability = type(
        "MatchingCapability",
        (),
        {"__init__": lambda self, unique_name="", matching_hotwords=None: None},
    )

    mock_capability_worker = MagicMock()
    mock_capability_worker.CapabilityWorker = MagicMock

    mock_main = MagicMock()
    mock_main.AgentWorker = MagicMock

    sys.modules["src"] = MagicMock()
    sys.modules["src.agent"] = MagicMock()
    sys.modules["src.agent.capability"] = mock_capability
    sys.modules["src.agent.capability_worker"] = mock_capability_worker
    sys.modules["src.main"] = mock_main

    yield


@pytest.fixture
def mock_worker():
    """Mock AgentWorker."""
    worker = MagicMock()
    worker.editor_logging_handler = MagicMock()
    worker.editor_logging_handler.info = MagicMock()
    worker.editor_logging_handler.error = MagicMock()
    worker.editor_logging_handler.warning = MagicMock()
    worker.session_tasks.sleep = AsyncMock()
    return worker


@pytest.fixture
def mock_capability_worker():
    """Mock CapabilityWorker."""
    cw = MagicMock()
    cw.speak = AsyncMock()
    cw.user_response = AsyncMock()
    cw.text_to_text_response = MagicMock()
    cw.check_if_file_exists = AsyncMock(return_value=False)
    cw.read_file = AsyncMock()
    cw.write_file = AsyncMock()
    cw.delete_file = AsyncMock()
    cw.resume_normal_flow = MagicMock()
    return cw


@pytest.fixture
def metrics():
    """Metrics sink recording every call."""
    return MagicMock()


@pytest.fixture
def fake_sleep():
    return AsyncMock()


@pytest.fixture
def settings():
    return HowFarSettings(
        maps_api_key="test-maps-key",
        directions_policy=RetryPolicy("maps.googleapis.com", 4000, 3),
        location_policy=RetryPolicy("api.amazonalexa.com", 2000, 3),
    )


@pytest.fixture
def http_client(mock_worker, metrics, fake_sleep):
    from http_client import RetryingHttpClient

    return RetryingHttpClient(mock_worker, metrics, sleep=fake_sleep, rng=FirstChoice())


@pytest.fixture
def capability(mock_worker, mock_capability_worker):
    """Create a HowFarCapability instance with mocked dependencies."""
    from main import HowFarCapability

    cap = HowFarCapability(unique_name="test_how_far", matching_hotwords=["how far"])
    cap.worker = mock_worker
    cap.capability_worker = mock_capability_worker
    return cap


def directions_body(
    duration="2 hours 50 mins",
    distance="140.3 mi",
    start="Seattle, WA, USA",
    end="Vancouver, BC, Canada",
    maneuvers=(),
):
    """Directions API body with a single leg."""
    return {
        "routes": [
            {
                "legs": [
                    {
                        "duration": {"text": duration},
                        "distance": {"text": distance},
                        "start_address": start,
                        "end_address": end,
                        "steps": [{"maneuver": m} for m in maneuvers],
                    }
                ]
            }
        ],
        "status": "OK",
    }
