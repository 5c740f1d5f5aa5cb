# run.py
# Entry point. Config and wiring only: no logic lives here.
#
# Viewport and model names come from the environment (see config.py).
# The first run of each case records a replay under ./test_replays; later
# runs replay it without calling the computer-use model.

from openai import OpenAI

from page_pilot.agent import e2e_test
from page_pilot.config import Settings

# (start URL, goal) pairs.
CASES = [
    # Form submission; needs a synthetic identity from the builtin tools
    (
        "https://scalingfastbook.com",
        "Sign up for a preview of the Scaling Fast book",
    ),

    # Read-only checks. The loop should scroll and stop without typing
    (
        "https://scalingfastbook.com",
        "Verify the page has testimonials from readers who have benefited from the Scaling Fast book",
    ),
    (
        "https://scalingfastbook.com",
        "Verify the page has pitch video from the author",
    ),
]


def main() -> None:
    settings = Settings.from_env()
    client = OpenAI()

    results = [
        (goal, e2e_test(url, goal, client=client, settings=settings))
        for url, goal in CASES
    ]

    for goal, passed in results:
        print(f"[{'PASS' if passed else 'FAIL'}] {goal}")

    if not all(passed for _, passed in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
