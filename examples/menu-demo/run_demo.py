#!/usr/bin/env python3
"""Menu / Game demo

Drives a small context stack with a fixed-rate tick loop: a main menu at the
bottom, a game pushed on top of it carrying a score, and a pause overlay that
reads the profile and score from below before being popped again.

Usage:
    python run_demo.py
    python run_demo.py --ticks 30 --verbose
"""
from __future__ import annotations

import logging
import sys

from strata.config.settings import load_config
from strata.contexts.registry import ContextRegistry
from strata.engine.driver import IntervalTickSource
from strata.engine.stack import ContextStack
from strata.events.dispatcher import EventDispatcher
from strata.events.observer import StdoutObserver
from strata.models.args import ContextArgs
from strata.models.context import Context
from strata.models.data import ContextData

registry = ContextRegistry()


class Profile(ContextData):
    player: str


class Score(ContextData):
    points: int = 0


@registry.register("menu")
class MainMenu(Context):
    def start(self, args: ContextArgs) -> None:
        print("  menu: welcome")

    def update(self, args: ContextArgs) -> None:
        pass

    def dispose(self) -> None:
        print("  menu: closed")


@registry.register("game")
class Game(Context):
    def start(self, args: ContextArgs) -> None:
        args.use(Profile, lambda p: print(f"  game: good luck, {p.player}"))

    def update(self, args: ContextArgs) -> None:
        args.use(Score, self._score_point)

    def _score_point(self, score: Score) -> None:
        score.points += 1

    def dispose(self) -> None:
        print("  game: saved")


@registry.register("pause")
class PauseOverlay(Context):
    def __init__(self) -> None:
        self.frames = 0

    def start(self, args: ContextArgs) -> None:
        args.use_both(Profile, Score, lambda p, s: print(f"  pause: {p.player} has {s.points} points"))

    def update(self, args: ContextArgs) -> None:
        self.frames += 1

    def dispose(self) -> None:
        print(f"  pause: resumed after {self.frames} frames")


def main() -> None:
    ticks = 20
    if "--ticks" in sys.argv:
        ticks = int(sys.argv[sys.argv.index("--ticks") + 1])
    if "--verbose" in sys.argv:
        logging.basicConfig(level=logging.DEBUG)

    config = load_config()
    dispatcher = EventDispatcher()
    dispatcher.add_observer(StdoutObserver())

    stack = ContextStack(config=config, registry=registry, event_emitter=dispatcher)
    source = IntervalTickSource(interval_ms=config.tick_interval_ms)

    stack.push_context("menu", Profile(player="ada"))
    stack.push_context("game", Score())
    stack.initialize(source)

    source.run(max_ticks=ticks // 2)
    stack.push_context("pause")
    source.run(max_ticks=ticks - ticks // 2)
    stack.pop_context()

    stack.terminate()
    stack.clear()


if __name__ == "__main__":
    main()
