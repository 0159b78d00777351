#!/usr/bin/env python3
"""Run an action card from a JSON scenario against an in-memory store.

Usage:
    uv run python scripts/run_action_card.py data/scenarios/flurry_of_blows.json
    uv run python scripts/run_action_card.py data/scenarios/flurry_of_blows.json --seed 7 --no-delays
    uv run python scripts/run_action_card.py data/scenarios/smoke_bomb.json --select smoke

A scenario holds ``card`` (an ActionCard), ``actors`` (a list of Actors),
``actor_id`` and ``target_ids``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from action_cards.engine import (
    DiceRoller,
    InMemoryDocumentStore,
    RepetitionController,
)
from action_cards.engine.core import Actor, ExecutionResult, GameRNG
from action_cards.ir import ActionCard
from action_cards.settings import get_settings


def print_result(result: ExecutionResult) -> None:
    print(f"\n{result.card_id}: {result.completed_repetitions}/{result.total_repetitions} repetition(s)")
    for rep in result.repetitions:
        roll = "-" if rep.roll_total is None else rep.roll_total
        print(f"  Repetition {rep.index} (roll {roll})")
        if rep.cost is not None:
            print(f"    cost: {rep.cost.amount} {rep.cost.resource} ({rep.cost.remaining} left)")
        for hit in rep.hits:
            name = hit.target.name if hit.target else "?"
            print(f"    {name}: one_hit={hit.one_hit} both_hit={hit.both_hit}")
        for dmg in rep.damage:
            if dmg.error:
                print(f"    {dmg.target.name}: {dmg.damage_type.value} failed ({dmg.error})")
            else:
                print(
                    f"    {dmg.target.name}: {dmg.damage_type.value} {dmg.amount} "
                    f"({dmg.resolve_before} -> {dmg.resolve_after})"
                )
        for status in rep.statuses:
            name = getattr(status.effect, "name", "?")
            state = "intensified" if status.intensified else "applied" if status.applied else "skipped"
            reason = status.warning or status.error
            suffix = f" ({reason})" if reason else ""
            print(f"    {status.target.name} <- {name}: {state}{suffix}")
        if rep.error:
            print(f"    error: {rep.error}")

    if result.terminated_early:
        print(f"  Stopped early: {result.termination_reason.value} - {result.termination_detail}")


def print_actors(store: InMemoryDocumentStore, actor_ids: list[str]) -> None:
    print("\nFinal state:")
    for actor_id in actor_ids:
        actor = store.snapshot(actor_id)
        print(f"  {actor.name}: resolve {actor.resolve}/{actor.max_resolve}, power {actor.power}/{actor.max_power}")
        for item in actor.items:
            mods = ", ".join(f"{m.key} {m.value:+g}" for m in item.modifiers)
            extra = f" x{item.quantity}" if item.type == "gear" else ""
            print(f"    [{item.type}] {item.name}{extra}{' (' + mods + ')' if mods else ''}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Resolve an action card from a scenario JSON.")
    parser.add_argument("scenario", type=Path, help="Path to scenario JSON file")
    parser.add_argument("--seed", type=int, default=42, help="Dice RNG seed")
    parser.add_argument("--no-delays", action="store_true", default=False, help="Disable pacing delays")
    parser.add_argument("--select", nargs="*", default=None, help="Effect ids to apply (default: all)")
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    with open(args.scenario) as f:
        raw = json.load(f)

    card = ActionCard.model_validate(raw["card"])
    actors = [Actor.model_validate(a) for a in raw["actors"]]
    store = InMemoryDocumentStore(actors)
    print(f"Loaded {card.name} ({card.mode.value}), {len(actors)} actor(s)")

    controller = RepetitionController(store, DiceRoller(GameRNG(args.seed)), settings=settings)
    result = asyncio.run(
        controller.execute(
            card,
            raw["actor_id"],
            raw["target_ids"],
            selected_effect_ids=args.select,
            disable_delays=True if args.no_delays else None,
        )
    )

    print_result(result)
    print_actors(store, [a.id for a in actors])


if __name__ == "__main__":
    main()
