# harness.py
# Computer-use model loop
#
# The loop is the kernel. The oracle is a passive responder; this class owns
# all control flow, dispatch and visual feedback. Each turn:
#
#   oracle response → first computer call? → ActionExecutor
#   → function calls → ToolRegistry → settle delay → snapshot
#   → next oracle turn (previous_response_id, image, tool outputs)
#
# The loop has no step bound: it ends only when a turn carries neither a
# computer call nor a function call.
#
# All terminal output is delegated to display.py: no formatting here.

import base64
import time
from typing import Any

from openai import OpenAI
from playwright.sync_api import Page

from page_pilot import display
from page_pilot.actions import ActionExecutor
from page_pilot.config import Settings
from page_pilot.models import LoopResult, SafetyCheck, StepRecord, parse_action
from page_pilot.tools import ToolRegistry


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ReplayNotFoundError(Exception):
    """Raised when a caller asks to continue from a replay that was never recorded."""


# ---------------------------------------------------------------------------
# System Prompts
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """\
You are an autonomous agent running in a sandbox environment designed to test \
web applications. Use the browser and provided tools to accomplish the user's \
goal. Submit forms without asking the user for confirmation.\
"""


def goal_prompt(location: str, goal: str) -> str:
    return f"You are in a browser navigated to {location}. {goal}."


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def image_url(png: bytes) -> str:
    return f"data:image/png;base64,{base64.b64encode(png).decode('ascii')}"


def take_snapshot(page: Page) -> bytes:
    png = page.screenshot()
    display.snapshot_taken(len(png))
    return png


def dump_output(response: Any) -> list[Any]:
    """Plain-data copy of a response's output items (for logs and transcripts)."""
    items = []
    for item in getattr(response, "output", None) or []:
        items.append(item.model_dump() if hasattr(item, "model_dump") else item)
    return items


def _first_computer_call(response: Any) -> StepRecord | None:
    """
    Extract the first computer call in a turn.

    Further proposals in the same turn are discarded: at most one action is
    in flight per turn.
    """
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "computer_call":
            continue
        checks = [
            SafetyCheck(
                id=check.id,
                code=getattr(check, "code", None),
                message=getattr(check, "message", None),
            )
            for check in getattr(item, "pending_safety_checks", None) or []
        ]
        action = getattr(item, "action", None)
        return StepRecord(
            call_id=item.call_id,
            action=parse_action(action) if action is not None else None,
            pending_safety_checks=checks,
        )
    return None


# ---------------------------------------------------------------------------
# ModelLoop
# ---------------------------------------------------------------------------


class ModelLoop:
    """
    Iterative computer-use loop against one live page.

    The oracle client is injected so tests can pass a double.

    Example:
        loop = ModelLoop(OpenAI(), page, default_registry(), Settings.from_env())
        result = loop.execute(page.url, "Sign up for the newsletter")
    """

    def __init__(
        self,
        client: OpenAI,
        page: Page,
        registry: ToolRegistry,
        settings: Settings | None = None,
        executor: ActionExecutor | None = None,
    ) -> None:
        self._client = client
        self._page = page
        self._registry = registry
        self._settings = settings or Settings()
        self._executor = executor or ActionExecutor(self._settings)

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def tools(self) -> list[dict[str, Any]]:
        """Action vocabulary plus the registered function tools."""
        return [
            {
                "type": "computer_use_preview",
                "display_width": self._settings.display_width,
                "display_height": self._settings.display_height,
                "environment": "browser",
            },
            *self._registry.manifest(),
        ]

    def _create(self, **request: Any) -> Any:
        display.calling_oracle(self._settings.computer_model)
        return self._client.responses.create(
            model=self._settings.computer_model,
            tools=self.tools(),
            truncation="auto",
            **request,
        )

    def _turn_inputs(
        self,
        step: StepRecord | None,
        snapshot: bytes,
        tool_outputs: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        if step is not None:
            first: dict[str, Any] = {
                "type": "computer_call_output",
                "call_id": step.call_id,
                "acknowledged_safety_checks": [
                    check.model_dump(exclude_none=True) for check in step.pending_safety_checks
                ],
                "output": {"type": "input_image", "image_url": image_url(snapshot)},
            }
        else:
            # Tool-only turn: no call to attach the image to.
            first = {
                "role": "user",
                "content": [{"type": "input_image", "image_url": image_url(snapshot)}],
            }
        return [first, *tool_outputs]

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def start(self, location: str, goal: str) -> Any:
        """First turn: goal text plus the initial snapshot."""
        snapshot = take_snapshot(self._page)
        return self._create(
            input=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": goal_prompt(location, goal)},
                        {"type": "input_image", "image_url": image_url(snapshot), "detail": "high"},
                    ],
                },
            ],
            reasoning={"summary": "concise"},
        )

    def run(self, response: Any) -> LoopResult:
        """
        Drive the loop from an initial response until the oracle stops.

        Oracle errors propagate; nothing is retried.
        """
        sequence: list[StepRecord] = []
        turn = 0

        while True:
            turn += 1
            display.turn_start(turn)

            step = _first_computer_call(response)
            tool_results = self._registry.resolve(response)

            if step is None and not tool_results:
                display.loop_complete(dump_output(response), len(sequence))
                return LoopResult(response=response, action_sequence=sequence)

            if step is not None:
                display.safety_checks(step.pending_safety_checks)
                sequence.append(step)
                if step.action is not None:
                    self._executor.execute(self._page, step.action)
                    time.sleep(self._settings.settle_delay)

            snapshot = take_snapshot(self._page)
            response = self._create(
                previous_response_id=response.id,
                input=self._turn_inputs(step, snapshot, [r.to_input() for r in tool_results]),
            )

    def execute(self, location: str, goal: str) -> LoopResult:
        return self.run(self.start(location, goal))
