# verifier.py
# Goal verification: one secondary oracle query per test.
#
# The reply is classified at the string level: success requires "yes" and
# forbids "no". Anything ambiguous counts as failure.

import json
from typing import Any

from openai import OpenAI

from page_pilot import display
from page_pilot.harness import dump_output, image_url


def question(goal: str) -> str:
    return (
        "Based on the following information, did the agent successfully accomplish "
        f'the goal: "{goal}"? Respond with "yes" or "no" only.'
    )


def classify(answer: str) -> bool:
    answer = answer.lower()
    return "yes" in answer and "no" not in answer


def answer_text(response: Any) -> str:
    """Join the output_text parts of every message item in a response."""
    parts: list[str] = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) == "output_text":
                parts.append(content.text)
    return " ".join(parts).lower()


class GoalVerifier:
    def __init__(self, client: OpenAI, model: str = "gpt-5-nano") -> None:
        self._client = client
        self._model = model

    def _ask(self, input_items: list[dict[str, Any]]) -> bool:
        response = self._client.responses.create(model=self._model, input=input_items)
        answer = answer_text(response)
        display.verification_answer(answer)
        return classify(answer)

    def verify_transcript(self, response: Any, goal: str) -> bool:
        """Judge the goal from the loop's final oracle response."""
        display.verification_start("transcript")
        transcript = json.dumps(dump_output(response), indent=2, default=str)
        return self._ask(
            [
                {"role": "user", "content": question(goal)},
                {"role": "user", "content": f"Final agent response: {transcript}"},
            ]
        )

    def verify_snapshot(self, png: bytes, goal: str) -> bool:
        """Judge the goal from a single screenshot of the final page."""
        display.verification_start("snapshot")
        return self._ask(
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": question(goal)},
                        {"type": "input_image", "image_url": image_url(png), "detail": "high"},
                    ],
                }
            ]
        )
