from unittest.mock import MagicMock, call, patch

import pytest
from conftest import computer_call, function_call, message, response

from page_pilot.config import Settings
from page_pilot.harness import SYSTEM_PROMPT, ModelLoop, goal_prompt, image_url
from page_pilot.models import SafetyCheck
from page_pilot.tools import ToolDefinition, ToolRegistry


@pytest.fixture
def registry():
    return ToolRegistry([ToolDefinition(name="get_email", description="Email.", handler=lambda: "qa@example.test")])


@pytest.fixture
def loop(client, page, registry, settings):
    return ModelLoop(client, page, registry, settings)


# ---------------------------------------------------------------------------
# Termination
# ---------------------------------------------------------------------------


def test_terminates_on_turn_without_calls(loop, client):
    final = response(message("All done."), id="resp_final")
    result = loop.run(final)

    assert result.response is final
    assert result.action_sequence == []
    client.responses.create.assert_not_called()


def test_runs_until_oracle_stops(loop, client, page):
    client.responses.create.side_effect = [
        response(computer_call({"type": "click", "x": 5, "y": 5}, call_id="call_2"), id="resp_2"),
        response(message("Finished"), id="resp_3"),
    ]
    first = response(computer_call({"type": "type", "text": "hi"}, call_id="call_1"), id="resp_1")

    result = loop.run(first)

    assert [s.call_id for s in result.action_sequence] == ["call_1", "call_2"]
    assert [s.action.type for s in result.action_sequence] == ["type", "click"]
    assert result.response.id == "resp_3"
    assert client.responses.create.call_count == 2
    page.keyboard.type.assert_called_once_with("hi")
    page.mouse.click.assert_called_once_with(5, 5, button="left")


def test_only_first_computer_call_is_honored(loop, client, page):
    client.responses.create.return_value = response(message("ok"), id="resp_2")
    first = response(
        computer_call({"type": "click", "x": 1, "y": 1}, call_id="call_a"),
        computer_call({"type": "click", "x": 9, "y": 9}, call_id="call_b"),
    )

    result = loop.run(first)

    assert [s.call_id for s in result.action_sequence] == ["call_a"]
    page.mouse.click.assert_called_once_with(1, 1, button="left")


# ---------------------------------------------------------------------------
# Turn inputs
# ---------------------------------------------------------------------------


def test_follow_up_request_shape(loop, client, page):
    client.responses.create.return_value = response(message("ok"), id="resp_2")
    check = type("Check", (), {"id": "sc_1", "code": "malicious_instructions", "message": "careful"})()
    first = response(
        computer_call({"type": "screenshot"}, call_id="call_1", checks=(check,)),
        function_call("get_email", call_id="call_fn"),
        id="resp_1",
    )

    loop.run(first)

    kwargs = client.responses.create.call_args.kwargs
    assert kwargs["previous_response_id"] == "resp_1"
    assert kwargs["model"] == "computer-use-preview"
    assert kwargs["truncation"] == "auto"
    assert kwargs["tools"][0] == {
        "type": "computer_use_preview",
        "display_width": 1280,
        "display_height": 720,
        "environment": "browser",
    }
    assert kwargs["tools"][1]["name"] == "get_email"

    call_output, tool_output = kwargs["input"]
    assert call_output["type"] == "computer_call_output"
    assert call_output["call_id"] == "call_1"
    assert call_output["acknowledged_safety_checks"] == [
        {"id": "sc_1", "code": "malicious_instructions", "message": "careful"}
    ]
    assert call_output["output"]["image_url"] == image_url(page.screenshot.return_value)
    assert tool_output == {"type": "function_call_output", "call_id": "call_fn", "output": "qa@example.test"}


def test_tool_only_turn_sends_snapshot_as_user_image(loop, client, page):
    client.responses.create.return_value = response(message("ok"), id="resp_2")

    result = loop.run(response(function_call("get_email", call_id="call_fn")))

    assert result.action_sequence == []
    snapshot_item, tool_output = client.responses.create.call_args.kwargs["input"]
    assert snapshot_item["role"] == "user"
    assert snapshot_item["content"][0]["type"] == "input_image"
    assert tool_output["output"] == "qa@example.test"
    page.screenshot.assert_called_once()


def test_snapshot_taken_even_when_action_fails(loop, client, page):
    page.mouse.click.side_effect = RuntimeError("detached")
    client.responses.create.return_value = response(message("ok"), id="resp_2")

    result = loop.run(response(computer_call({"type": "click", "x": 1, "y": 2})))

    assert len(result.action_sequence) == 1
    page.screenshot.assert_called_once()


def test_safety_checks_reported_as_models(loop, client):
    client.responses.create.return_value = response(message("ok"), id="resp_2")
    check = type("Check", (), {"id": "sc_1", "code": "irrelevant_domain", "message": "m"})()

    with patch("page_pilot.harness.display") as mock_display:
        loop.run(response(computer_call({"type": "wait"}, checks=(check,))))

    (checks,) = mock_display.safety_checks.call_args.args
    assert checks == [SafetyCheck(id="sc_1", code="irrelevant_domain", message="m")]


# ---------------------------------------------------------------------------
# Settle delay
# ---------------------------------------------------------------------------


def test_settle_delay_sits_between_action_and_snapshot(client, page, registry):
    loop = ModelLoop(client, page, registry, Settings(settle_delay=0.2))
    client.responses.create.return_value = response(message("ok"), id="resp_2")

    order = MagicMock()
    order.attach_mock(page.mouse.click, "click")
    order.attach_mock(page.screenshot, "screenshot")
    with patch("page_pilot.harness.time") as mock_time:
        order.attach_mock(mock_time.sleep, "sleep")
        loop.run(response(computer_call({"type": "click", "x": 3, "y": 4})))

    assert order.mock_calls == [
        call.click(3, 4, button="left"),
        call.sleep(0.2),
        call.screenshot(),
    ]


def test_tool_only_turn_skips_settle_delay(client, page, registry):
    loop = ModelLoop(client, page, registry, Settings(settle_delay=0.2))
    client.responses.create.return_value = response(message("ok"), id="resp_2")

    with patch("page_pilot.harness.time") as mock_time:
        loop.run(response(function_call("get_email", call_id="call_fn")))

    mock_time.sleep.assert_not_called()
    page.screenshot.assert_called_once()


def test_oracle_error_propagates(loop, client):
    client.responses.create.side_effect = ConnectionError("oracle unreachable")

    with pytest.raises(ConnectionError):
        loop.run(response(computer_call({"type": "wait"})))


# ---------------------------------------------------------------------------
# First turn
# ---------------------------------------------------------------------------


def test_start_sends_goal_and_initial_snapshot(loop, client, page):
    client.responses.create.return_value = response(message("ok"))

    loop.start("https://example.test", "Sign up for the newsletter")

    kwargs = client.responses.create.call_args.kwargs
    assert "previous_response_id" not in kwargs
    assert kwargs["reasoning"] == {"summary": "concise"}
    system, user = kwargs["input"]
    assert system == {"role": "system", "content": SYSTEM_PROMPT}
    assert user["content"][0]["text"] == goal_prompt("https://example.test", "Sign up for the newsletter")
    assert user["content"][1]["image_url"] == image_url(page.screenshot.return_value)


def test_execute_chains_start_and_run(loop, client):
    client.responses.create.side_effect = [
        response(computer_call({"type": "wait"}, call_id="call_1"), id="resp_1"),
        response(message("done"), id="resp_2"),
    ]

    result = loop.execute("https://example.test", "Look around")

    assert [s.action.type for s in result.action_sequence] == ["wait"]
    assert result.response.id == "resp_2"
