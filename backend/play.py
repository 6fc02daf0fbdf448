#!/usr/bin/env python3
"""Interactive CLI script to playtest the stage catalog in a terminal.

Usage:
    python play.py                    # plays every stage in order
    python play.py path/to/stages     # plays a different stage directory

Features:
    - Shows each stage's reference material, then prompts for every field
    - Re-prompts for fields that fail validation, like the web form does
    - Prints per-stage results and the final rating and achievements

The stage clock never ticks here, so timed stages earn their full time bonus.
No server needed.
"""

import sys
from pathlib import Path

from dataentry.core.errors import StageValidationError
from dataentry.core.game_controller import GameController
from dataentry.logging_config import configure_logging
from dataentry.schemas.stage import FieldDefinition, ScoreResult
from dataentry.services.stage_service import StageService

# --- ANSI Colors ---
DIVIDER = "\033[90m" + "─" * 50 + "\033[0m"
RESET = "\033[0m"
DIM = "\033[90m"
BOLD = "\033[1m"
YELLOW = "\033[93m"
RED = "\033[91m"
GREEN = "\033[92m"


def prompt_field(field: FieldDefinition, current: str) -> str:
    """Ask for one field's value. Enter keeps the current value."""
    marker = f"{RED}*{RESET}" if field.required else " "
    hint = f" {DIM}[{current}]{RESET}" if current and current != "false" else ""

    if field.kind == "select":
        print(f"  {marker} {field.label}:")
        for i, option in enumerate(field.options, start=1):
            print(f"      {i}. {option}")
        while True:
            raw = input(f"    choose 1-{len(field.options)}{hint}: ").strip()
            if not raw:
                return current
            if raw.isdigit() and 1 <= int(raw) <= len(field.options):
                return field.options[int(raw) - 1]
            print(f"    {RED}invalid choice{RESET}")

    if field.kind == "checkbox":
        raw = input(f"  {marker} {field.label} (y/n): ").strip().lower()
        if not raw:
            return current
        return "true" if raw in ("y", "yes") else "false"

    raw = input(f"  {marker} {field.label}{hint}: ").strip()
    return raw or current


def show_result(result: ScoreResult) -> None:
    print()
    print(DIVIDER)
    print(f"{BOLD}  Stage {result.stage} complete{RESET}")
    print(f"  {YELLOW}Score: {result.score}  Accuracy: {result.accuracy}%  Errors: {result.error_count}{RESET}")


def play_stage(game: GameController) -> None:
    """Fill in and submit the active stage, retrying until it validates."""
    controller = game.active_stage
    stage = controller.stage

    print()
    print(f"{BOLD}" + "=" * 50 + f"{RESET}")
    print(f"{BOLD}  Stage {stage.sequence_number}/{game.snapshot().total_stages}: {stage.name}{RESET}")
    print(f"  {DIM}{stage.description}{RESET}")
    print(f"{BOLD}" + "=" * 50 + f"{RESET}")
    print()
    for line in stage.reference_material.strip().splitlines():
        print(f"  {line}")
    print()
    print(DIVIDER)

    to_fill = stage.fields
    while True:
        for field in to_fill:
            value = prompt_field(field, controller.submission[field.id])
            controller.update_field(field.id, value)
        try:
            result = controller.submit()
        except StageValidationError as e:
            print()
            for message in e.errors.values():
                print(f"  {RED}✗ {message}{RESET}")
            to_fill = [f for f in stage.fields if f.id in e.errors]
            continue
        show_result(result)
        return


def main() -> None:
    configure_logging("WARNING")
    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    store = StageService(data_dir)
    game = GameController(store, submit_delay=0, timeout_delay=0)

    print(f"\n{BOLD}  Data Entry Rush{RESET}")
    print(f"  {DIM}Read each source document and enter the facts into the form.{RESET}")
    print(f"  {DIM}Exact matches score points; wrong entries cost points.{RESET}")
    game.start()

    try:
        while game.status == "playing":
            play_stage(game)
    except (KeyboardInterrupt, EOFError):
        if game.status == "playing":
            game.quit()
        print(f"\n{DIM}  Game abandoned.{RESET}")
        return

    summary = game.summary()
    print()
    print(f"{BOLD}" + "=" * 50 + f"{RESET}")
    print(f"{BOLD}  Challenge complete!{RESET}")
    print(f"  Total score: {summary.state.cumulative_score}")
    print(f"  Accuracy:    {summary.state.cumulative_accuracy}%")
    print(f"  Errors:      {summary.state.cumulative_errors}")
    print(f"  Rating:      {GREEN}{summary.rating}{RESET}")
    print(f"  Achievements: {', '.join(summary.achievements)}")
    print()


if __name__ == "__main__":
    main()
