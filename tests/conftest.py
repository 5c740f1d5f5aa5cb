from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from page_pilot.config import Settings

# ---------------------------------------------------------------------------
# Oracle response builders
# ---------------------------------------------------------------------------


def computer_call(action: dict, call_id: str = "call_1", checks: tuple = ()):
    return SimpleNamespace(
        type="computer_call",
        call_id=call_id,
        action=action,
        pending_safety_checks=list(checks),
    )


def function_call(name: str, call_id: str = "fc_call_1"):
    return SimpleNamespace(type="function_call", call_id=call_id, name=name, arguments="{}")


def message(text: str):
    return SimpleNamespace(
        type="message",
        content=[SimpleNamespace(type="output_text", text=text)],
    )


def response(*items, id: str = "resp_1"):
    return SimpleNamespace(id=id, output=list(items))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    return Settings(display_width=1280, display_height=720, settle_delay=0, replay_delay=0)


@pytest.fixture
def page():
    mock_page = MagicMock()
    mock_page.url = "https://example.test/"
    mock_page.screenshot.return_value = b"\x89PNG fake"
    return mock_page


@pytest.fixture
def client():
    return MagicMock()
