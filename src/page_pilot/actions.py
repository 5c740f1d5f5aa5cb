# actions.py
# ActionExecutor: turns one semantic Action into Playwright mouse/keyboard
# calls on a live page.
#
# Execution is best-effort. A surface operation that raises is reported and
# swallowed; the oracle notices the missing effect on the next snapshot.

import time

from playwright.sync_api import Page

from page_pilot import display
from page_pilot.config import Settings
from page_pilot.models import (
    Action,
    ClickAction,
    DoubleClickAction,
    DragAction,
    KeypressAction,
    MoveAction,
    ScreenshotAction,
    ScrollAction,
    StepRecord,
    TypeAction,
    WaitAction,
)


def _translate_key(key: str) -> str:
    """Map the oracle's named keys onto Playwright key names."""
    if "ENTER" in key:
        return "Enter"
    if "SPACE" in key:
        return " "
    return key


class ActionExecutor:
    """Dispatches Action variants onto a Playwright page."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    def execute(self, page: Page, action: Action) -> None:
        display.action_dispatched(action)
        try:
            self._dispatch(page, action)
        except Exception as exc:
            display.action_failed(action, exc)

    def _dispatch(self, page: Page, action: Action) -> None:
        if isinstance(action, ClickAction):
            page.mouse.click(action.x, action.y, button=action.button)

        elif isinstance(action, DoubleClickAction):
            page.mouse.dblclick(action.x, action.y)

        elif isinstance(action, DragAction):
            start, *rest = action.path
            page.mouse.move(start.x, start.y)
            page.mouse.down()
            for point in rest:
                page.mouse.move(point.x, point.y)
            page.mouse.up()

        elif isinstance(action, KeypressAction):
            for key in action.keys:
                page.keyboard.press(_translate_key(key))

        elif isinstance(action, MoveAction):
            page.mouse.move(action.x, action.y)

        elif isinstance(action, ScrollAction):
            page.mouse.move(action.x, action.y)
            page.evaluate(f"window.scrollBy({action.scroll_x}, {action.scroll_y})")

        elif isinstance(action, TypeAction):
            page.keyboard.type(action.text)

        elif isinstance(action, WaitAction):
            page.wait_for_timeout(self._settings.wait_ms)

        elif isinstance(action, ScreenshotAction):
            # The loop snapshots after every turn; nothing to do here.
            pass

        else:
            display.unrecognized_action(action)

    def replay(self, page: Page, sequence: list[StepRecord]) -> int:
        """
        Execute a recorded sequence in order without consulting the oracle.

        Returns the number of actions dispatched. Steps with no action are
        skipped and do not incur the replay delay.
        """
        dispatched = 0
        for step in sequence:
            if step.action is None:
                continue
            self.execute(page, step.action)
            time.sleep(self._settings.replay_delay)
            dispatched += 1
        return dispatched
