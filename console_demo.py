"""
Offline console demo: runs a full rush without any agent service.

Uses the real session orchestrator, classifier, response generator and
rate limiter, with the scripted agent standing in for the voice agent.
You pick the reply for each complaint; the report card is printed when
the rush is over.

Usage:
    python console_demo.py
    python console_demo.py --auto good --speed 10
    python console_demo.py --auto random --customers 3 --seed 7
"""

import argparse
import asyncio
import dataclasses
import random
import sys
import threading
from typing import Callable, Optional

from barista_rush.agents import DEFAULT_CUSTOMERS, Collaborators, create_backend, get_registered_backends
from barista_rush.config import settings
from barista_rush.conversation.rate_limiter import RateLimiterGate
from barista_rush.evaluation import InMemoryMetricsRecorder, SatisfactionGauge, format_report, generate_report
from barista_rush.session import SessionOrchestrator
from barista_rush.timing import Clock, RealClock

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

AUTO_POLICIES = ("good", "bad", "random")


def system_log(text: str) -> None:
    print(f"{DIM}  >> {text}{RESET}")


class ConsoleChoicePresenter:
    """Shows both replies in shuffled order and reports the operator's pick."""

    def __init__(self, auto: Optional[str] = None, rng: Optional[random.Random] = None) -> None:
        self._auto = auto
        self._rng = rng or random.Random()
        self._reader: Optional[asyncio.Task] = None

    def present_choice(
        self,
        prompt: str,
        good_text: str,
        bad_text: str,
        on_choice: Callable[[bool], None],
    ) -> None:
        options = [(good_text, True), (bad_text, False)]
        self._rng.shuffle(options)

        print(f"\n{BLUE}[Customer]{RESET} {prompt}")
        for number, (text, _) in enumerate(options, start=1):
            print(f"  {BOLD}{number}.{RESET} {text}")

        if self._auto is not None:
            selected = self._auto_pick()
            system_log(f"Auto-selected the {'good' if selected else 'bad'} reply")
            on_choice(selected)
            return

        self.cancel()
        self._reader = asyncio.get_running_loop().create_task(self._read_choice(options, on_choice))

    def cancel(self) -> None:
        """Drop an unanswered prompt."""
        if self._reader is not None and not self._reader.done():
            self._reader.cancel()
        self._reader = None

    def _auto_pick(self) -> bool:
        if self._auto == "random":
            return self._rng.random() < 0.5
        return self._auto == "good"

    async def _read_choice(
        self,
        options: list[tuple[str, bool]],
        on_choice: Callable[[bool], None],
    ) -> None:
        while True:
            raw = (await read_line(f"{GREEN}Your reply (1/2): {RESET}")).strip()
            if raw in ("1", "2"):
                on_choice(options[int(raw) - 1][1])
                return
            print(f"{RED}Please type 1 or 2.{RESET}")


async def read_line(prompt: str) -> str:
    """input() on a daemon thread, so a pending prompt never holds up exit."""
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def deliver(result: Optional[str], error: Optional[BaseException]) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def read() -> None:
        try:
            result, error = input(prompt), None
        except EOFError as exc:
            result, error = None, exc
        if not loop.is_closed():
            loop.call_soon_threadsafe(deliver, result, error)

    threading.Thread(target=read, name="console-input", daemon=True).start()
    return await future


class ConsoleTransitionPresenter:
    """Prints fades and completes them after the configured duration."""

    def __init__(self, clock: Clock, duration: float) -> None:
        self._clock = clock
        self._duration = duration

    def fade_in(self, on_complete: Callable[[], None]) -> None:
        system_log("Fading out the counter...")
        self._clock.call_later(self._duration, on_complete)

    def fade_out(self, on_complete: Callable[[], None]) -> None:
        system_log("Next customer steps up.")
        self._clock.call_later(self._duration, on_complete)


class ConsoleSatisfaction:
    """Satisfaction gauge that echoes every change."""

    def __init__(self, gauge: SatisfactionGauge) -> None:
        self.gauge = gauge

    def apply_choice(self, was_good: bool) -> None:
        self.gauge.apply_choice(was_good)
        colour = GREEN if was_good else RED
        print(f"{colour}  Satisfaction: {self.gauge.value}/100{RESET}")


class ConsoleOwner:
    """Keeps the served/total tally for the rush."""

    def __init__(self, total: int) -> None:
        self.total = total
        self.served = 0
        self.complete = False

    def on_customer_served(self) -> None:
        self.served += 1
        print(f"{YELLOW}{BOLD}  Served {self.served}/{self.total}{RESET}")

    def on_all_customers_complete(self) -> None:
        self.complete = True


async def run_rush(args: argparse.Namespace) -> int:
    speed = args.speed
    timing = settings.timing.scaled(1.0 / speed)
    config = dataclasses.replace(settings, timing=timing)

    clock = RealClock()
    rng = random.Random(args.seed)
    customers = DEFAULT_CUSTOMERS[: args.customers] if args.customers else DEFAULT_CUSTOMERS

    agents = create_backend(
        args.agent,
        clock=clock,
        start_delay=0.5 / speed,
        speech_duration=2.0 / speed,
        transcript_lag=0.5 / speed,
    )
    gauge = SatisfactionGauge()
    metrics = InMemoryMetricsRecorder(clock, satisfaction=lambda: gauge.value)
    owner = ConsoleOwner(len(customers))
    presenter = ConsoleChoicePresenter(auto=args.auto, rng=rng)
    collaborators = Collaborators(
        presenter=presenter,
        satisfaction=ConsoleSatisfaction(gauge),
        metrics=metrics,
        transitions=ConsoleTransitionPresenter(clock, timing.fade_duration),
        owner=owner,
    )
    orchestrator = SessionOrchestrator(
        agents,
        customers,
        collaborators,
        clock=clock,
        gate=RateLimiterGate(clock, min_interval=timing.api_call_delay),
        config=config,
    )

    print()
    print(f"{BOLD}{'=' * 60}{RESET}")
    print(f"{BOLD}  {settings.app_name.upper()} - Console Demo{RESET}")
    print(f"{BOLD}  Customers: {len(customers)}  Speed: x{speed:g}{RESET}")
    print(f"{BOLD}  Press Ctrl+C to stop{RESET}")
    print(f"{BOLD}{'=' * 60}{RESET}")

    try:
        await orchestrator.run()
    except asyncio.CancelledError:
        orchestrator.stop()
        raise
    finally:
        presenter.cancel()

    print()
    print(format_report(generate_report(metrics.interactions)))
    print(f"{DIM}  State trace: {' -> '.join(orchestrator.machine.get_state_trace())}{RESET}")
    return 0 if owner.complete else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline Barista Rush console demo")
    parser.add_argument(
        "--auto",
        choices=AUTO_POLICIES,
        default=None,
        help="Pick replies automatically instead of prompting",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Time scale; 10 runs every delay ten times faster",
    )
    parser.add_argument(
        "--customers",
        type=int,
        default=None,
        help="Serve only the first N customers of the default roster",
    )
    parser.add_argument(
        "--agent",
        choices=get_registered_backends(),
        default="scripted",
        help="Agent backend to play the customers",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for shuffling and --auto random")
    args = parser.parse_args()

    if args.speed <= 0:
        parser.error("--speed must be > 0")
    if args.customers is not None and args.customers < 1:
        parser.error("--customers must be >= 1")

    try:
        sys.exit(asyncio.run(run_rush(args)))
    except KeyboardInterrupt:
        print(f"\n{DIM}Rush stopped.{RESET}")


if __name__ == "__main__":
    main()
