# display.py
# All terminal output for page_pilot.
#
# This module owns presentation entirely. The loop, executor and verifier
# never format strings. They call named functions here.
#
# Colour language:
#   cyan: orchestration / routing events
#   blue: oracle calls and responses
#   yellow: replay cache events
#   green: success / confirmed
#   red: failures, ignored actions
#   magenta: surface actions and tool calls

import json
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from page_pilot.models import Action, SafetyCheck, StepRecord

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        return value[:max_len] + "…"
    return value


def _describe(action: Action) -> str:
    fields = action.model_dump(exclude={"type"})
    text = f"{action.type} {json.dumps(fields)}" if fields else action.type
    return escape(text)


# ---------------------------------------------------------------------------
# Test entry
# ---------------------------------------------------------------------------


def banner(location: str, goal: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]page_pilot end-to-end test[/bold cyan]\n\n"
            f"[dim]Location :[/dim] [white]{escape(location)}[/white]\n"
            f"[dim]Goal     :[/dim] [white]{escape(goal)}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def fresh_run() -> None:
    console.print(
        _label("AGENT", "cyan"),
        "[cyan] No replay recorded — running the model loop from scratch.[/cyan]",
    )


# ---------------------------------------------------------------------------
# Model loop
# ---------------------------------------------------------------------------


def calling_oracle(model: str) -> None:
    console.print(_label("LOOP", "blue"), f"[blue] → Calling [bold]{model}[/bold]…[/blue]")


def turn_start(turn: int) -> None:
    console.print()
    console.print(Rule(f"[blue]TURN {turn}[/blue]", style="blue"))


def safety_checks(checks: list[SafetyCheck]) -> None:
    if not checks:
        return
    for check in checks:
        console.print(
            f"  [yellow]Safety check[/yellow] [dim]{check.id}[/dim] "
            f"[white]{check.code or ''}[/white] {_mono(check.message or '', 100)}"
        )


def action_dispatched(action: Action) -> None:
    console.print(f"  [magenta]Action[/magenta]   [bold white]{_mono(_describe(action), 160)}[/bold white]")


def action_failed(action: Action, exc: Exception) -> None:
    console.print(
        Panel(
            f"[bold red]{_describe(action)}[/bold red]\n\n[white]{escape(repr(exc))}[/white]\n"
            "[dim]Continuing — the next snapshot shows the oracle what happened.[/dim]",
            title=_label("ACTION FAILED", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


def unrecognized_action(action: Action) -> None:
    console.print(f"  [red]Unrecognized action[/red] [dim]{escape(_mono(json.dumps(action.model_dump()), 160))}[/dim]")


def tool_call(name: str, output: str) -> None:
    console.print(
        f"  [magenta]Tool[/magenta]     [bold white]{name}[/bold white]"
        f"  [dim]→ {escape(_mono(output, 80))}[/dim]"
    )


def snapshot_taken(size: int) -> None:
    console.print(f"  [dim]Snapshot captured ({size} bytes)[/dim]")


def loop_complete(output: list[Any], steps: int) -> None:
    console.print()
    console.print(
        Panel(
            f"[white]{escape(_mono(json.dumps(output, default=str), 600))}[/white]",
            title=_label(f"LOOP COMPLETE — {steps} action(s)", "blue"),
            border_style="blue",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# Replay cache
# ---------------------------------------------------------------------------


def replay_found(key: str, steps: int) -> None:
    console.print(
        _label("REPLAY", "yellow"),
        f"[yellow] Restoring {steps} recorded action(s)[/yellow] [dim]{key}[/dim]",
    )


def replay_saved(key: str, sequence: list[StepRecord]) -> None:
    console.print()
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold yellow", padding=(0, 1))
    table.add_column("#", justify="center", width=4)
    table.add_column("Call", style="dim", width=16)
    table.add_column("Action", style="white")

    for index, step in enumerate(sequence, start=1):
        table.add_row(
            str(index),
            _mono(step.call_id, 14),
            _describe(step.action) if step.action is not None else "[dim]—[/dim]",
        )

    console.print(
        Panel(
            table,
            title=_label("REPLAY SAVED", "yellow"),
            subtitle=f"[dim]{key}[/dim]",
            border_style="yellow",
            padding=(0, 1),
        )
    )


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


def verification_start(evidence: str) -> None:
    console.print()
    console.print(Rule(f"[cyan]VERIFYING GOAL ({evidence})[/cyan]", style="cyan"))


def verification_answer(answer: str) -> None:
    console.print(f"  [blue]Verifier says[/blue] [white]{escape(_mono(answer, 200))}[/white]")


def final_result(passed: bool) -> None:
    console.print()
    if passed:
        console.print(
            Panel("[bold green]Goal accomplished.[/bold green]", title=_label("PASS ✓", "green"), border_style="green")
        )
    else:
        console.print(
            Panel("[bold red]Goal not accomplished.[/bold red]", title=_label("FAIL ✗", "red"), border_style="red")
        )
    console.print()
