"""
Headless driving loop.

Runs tick() repeatedly and polls a control channel between ticks. Input
sources (signal handlers, UI threads) only post messages to the channel;
they never touch simulation state. There is no mid-tick cancellation.
"""

import queue
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from .simulation import HabitatSimulation
from .data_types import Species
from .constants import TICK_SUMMARY_INTERVAL


@dataclass(frozen=True)
class StopRequest:
    """Ask the loop to stop before the next tick"""
    reason: str = "requested"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer press in presentation coordinates (echoed to console)"""
    x: int
    y: int


ControlChannel = Union[queue.Queue, queue.SimpleQueue]


@dataclass
class RunResult:
    ticks_run: int
    stop_reason: Optional[str]  # None when max_ticks was reached
    counts: Dict[Species, int]


def _drain_control(control: Optional[ControlChannel]) -> Optional[str]:
    """
    Handle all pending control messages.

    Returns:
        Stop reason if a StopRequest was received, else None
    """
    if control is None:
        return None

    stop_reason = None
    while True:
        try:
            message = control.get_nowait()
        except queue.Empty:
            break

        if isinstance(message, StopRequest):
            stop_reason = message.reason
        elif isinstance(message, PointerEvent):
            print(f"({message.x},{message.y})")
        else:
            print(f"[WARN] Ignoring unknown control message: {message!r}")

    return stop_reason


def run(
    sim: HabitatSimulation,
    control: Optional[ControlChannel] = None,
    max_ticks: Optional[int] = None,
    tick_interval_ms: int = 0,
    summary_every: int = TICK_SUMMARY_INTERVAL,
    sleep: Callable[[float], None] = time.sleep
) -> RunResult:
    """
    Drive the simulation until stopped or max_ticks is reached.

    Args:
        sim: Initialized simulation
        control: Channel carrying StopRequest / PointerEvent messages
        max_ticks: Tick limit (None or <= 0 = run until a StopRequest arrives)
        tick_interval_ms: Pause after each tick
        summary_every: Print tick summary every N ticks (0 = never)
        sleep: Sleep function (injectable for tests)

    Returns:
        RunResult with ticks run, stop reason and final census
    """
    ticks_run = 0
    stop_reason = None

    while True:
        stop_reason = _drain_control(control)
        if stop_reason is not None:
            break

        sim.tick()
        ticks_run += 1

        if summary_every and sim.tick_count % summary_every == 0:
            sim.print_tick_summary()

        if max_ticks is not None and max_ticks > 0 and ticks_run >= max_ticks:
            break

        if tick_interval_ms > 0:
            sleep(tick_interval_ms / 1000.0)

    return RunResult(ticks_run=ticks_run, stop_reason=stop_reason, counts=sim.population_counts())
