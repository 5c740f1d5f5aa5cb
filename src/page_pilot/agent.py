# agent.py
# Orchestration: decides per (location, goal) whether to replay a recorded
# action sequence or run the model loop from scratch, then verifies the goal.
#
#   replay recorded? → replay actions → verify final snapshot
#   otherwise        → model loop → save replay → verify transcript
#
# A replay is saved only after the loop returns. A run that raises leaves
# no record behind.

from typing import Iterable

from openai import OpenAI
from playwright.sync_api import Page

from page_pilot import display
from page_pilot.actions import ActionExecutor
from page_pilot.browser import open_browser
from page_pilot.config import Settings
from page_pilot.harness import ModelLoop, ReplayNotFoundError, take_snapshot
from page_pilot.replay import ReplayStore
from page_pilot.store import FileStore
from page_pilot.tools import ToolDefinition, default_registry
from page_pilot.verifier import GoalVerifier


def default_replays(settings: Settings) -> ReplayStore:
    return ReplayStore(FileStore(settings.replay_dir))


def replay_actions(
    location: str,
    goal: str,
    page: Page,
    replays: ReplayStore,
    settings: Settings | None = None,
) -> bool:
    """Replay the recorded sequence onto ``page``. False if none is usable."""
    sequence = replays.load(location, goal)
    if sequence is None:
        return False

    display.replay_found(replays.key_for(location, goal), len(sequence))
    ActionExecutor(settings).replay(page, sequence)
    return True


def run_from_replay(
    location: str,
    goal: str,
    page: Page,
    *,
    client: OpenAI,
    replays: ReplayStore,
    settings: Settings | None = None,
) -> bool:
    settings = settings or Settings()
    replay_actions(location, goal, page, replays, settings)
    snapshot = take_snapshot(page)
    return GoalVerifier(client, settings.verifier_model).verify_snapshot(snapshot, goal)


def run_from_scratch(
    location: str,
    goal: str,
    page: Page,
    tools: Iterable[ToolDefinition] = (),
    *,
    client: OpenAI,
    replays: ReplayStore,
    settings: Settings | None = None,
) -> bool:
    settings = settings or Settings()
    display.fresh_run()

    loop = ModelLoop(client, page, default_registry(tools), settings)
    result = loop.execute(location, goal)

    key = replays.save(location, goal, result.action_sequence)
    display.replay_saved(key, result.action_sequence)

    return GoalVerifier(client, settings.verifier_model).verify_transcript(result.response, goal)


def e2e_test(
    start_location: str | Page,
    goal: str,
    tools: Iterable[ToolDefinition] = (),
    *,
    client: OpenAI | None = None,
    settings: Settings | None = None,
    replays: ReplayStore | None = None,
) -> bool:
    """
    Run one end-to-end test and return whether the goal was accomplished.

    ``start_location`` is either a URL (a browser is opened and closed here)
    or a page the caller already prepared, e.g. via ``continue_from``.
    """
    settings = settings or Settings.from_env()
    if client is None:
        client = OpenAI()
    if replays is None:
        replays = default_replays(settings)

    session = None
    if isinstance(start_location, str):
        session = open_browser(start_location, settings)
        page = session.page
    else:
        page = start_location

    try:
        location = page.url
        display.banner(location, goal)

        if replays.exists(location, goal) and replays.load(location, goal) is not None:
            passed = run_from_replay(
                location, goal, page, client=client, replays=replays, settings=settings
            )
        else:
            passed = run_from_scratch(
                location, goal, page, tools, client=client, replays=replays, settings=settings
            )
    finally:
        if session is not None:
            session.close()

    display.final_result(passed)
    return passed


def continue_from(
    url: str,
    goal: str,
    *,
    settings: Settings | None = None,
    replays: ReplayStore | None = None,
) -> Page:
    """
    Open ``url`` and replay a previously recorded run on it.

    Returns the live page so a follow-up test can start where the recorded
    one ended. The browser stays open; it is the caller's to close.
    """
    settings = settings or Settings.from_env()
    if replays is None:
        replays = default_replays(settings)

    session = open_browser(url, settings)
    page = session.page
    if not replay_actions(page.url, goal, page, replays, settings):
        session.close()
        raise ReplayNotFoundError(
            "No saved computer call stack found for the given URL and goal."
        )
    return page
