"""
Spin resolution: maps a power level and a uniform random draw to a target
rotation and a winning segment.

The wheel turns one way while the pointer stays fixed at angle 0, so the
slice under the pointer is found by inverting the final rotation. Power only
decides how many whole turns are added (and how long the animation runs);
the landing slice comes from the fractional part contributed by random(),
which covers at least two full turns, so every segment wins with
probability 1/N whatever the power or the resting angle.
"""

import random
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from config import (
    BASE_ROTATIONS, POWER_SPREAD, EXTRA_ROTATION_RANGE, RESPIN_LABEL,
)
from engine.easing import spin_duration_ms
from engine.geometry import TWO_PI, resolve_index

logger = logging.getLogger(__name__)

RandomSource = Callable[[], float]

_SYSTEM_RANDOM = random.SystemRandom()


class EmptyWheelError(ValueError):
    """Raised when a wheel is built with no segments."""


class SpinInProgressError(RuntimeError):
    """Raised when a spin is requested while another one is still running."""


def system_random() -> float:
    """Uniform float in [0, 1) from the OS entropy source."""
    return _SYSTEM_RANDOM.random()


@dataclass(frozen=True)
class WheelSpec:
    """Ordered segment labels, each taking an equal 2π/N slice."""
    segments: tuple

    def __post_init__(self):
        if not self.segments:
            raise EmptyWheelError("A wheel needs at least one segment")
        object.__setattr__(self, "segments", tuple(str(s) for s in self.segments))

    @classmethod
    def from_names(cls, names: Sequence[str]) -> "WheelSpec":
        return cls(tuple(names))

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    @property
    def segment_angle(self) -> float:
        return TWO_PI / len(self.segments)

    @property
    def respin_count(self) -> int:
        return sum(1 for s in self.segments if s == RESPIN_LABEL)

    def label(self, index: int) -> str:
        return self.segments[index % len(self.segments)]


@dataclass(frozen=True)
class SpinResult:
    start_rotation: float
    final_rotation: float
    index: int
    label: str
    power: float
    duration_ms: float

    @property
    def is_respin(self) -> bool:
        return self.label == RESPIN_LABEL


def clamp_power(power: float) -> float:
    return min(1.0, max(0.0, float(power)))


def target_rotation(power: float, current_rotation: float, draw: float) -> float:
    """Final cumulative rotation for a spin starting at current_rotation."""
    base_rotations = BASE_ROTATIONS + clamp_power(power) * POWER_SPREAD
    extra_rotations = draw * EXTRA_ROTATION_RANGE
    return current_rotation + TWO_PI * (base_rotations + extra_rotations)


def resolve_spin(wheel: WheelSpec, power: float, current_rotation: float = 0.0,
                 rand: Optional[RandomSource] = None) -> SpinResult:
    """
    Resolve one spin. Pure given rand: the same power, starting rotation and
    draw always give the same final rotation and segment.
    """
    rand = rand or system_random
    power = clamp_power(power)
    final_rotation = target_rotation(power, current_rotation, rand())
    index = resolve_index(final_rotation, wheel.segment_count)
    return SpinResult(
        start_rotation=current_rotation,
        final_rotation=final_rotation,
        index=index,
        label=wheel.segments[index],
        power=power,
        duration_ms=spin_duration_ms(power),
    )


class SpinController:
    """
    Owns the wheel's resting rotation across a session and gates spins with
    a busy flag: start() resolves the outcome up front, finish() releases the
    wheel once the animation has landed.
    """

    def __init__(self, wheel: WheelSpec, rand: Optional[RandomSource] = None,
                 rotation: float = 0.0):
        self.wheel = wheel
        self.rand = rand or system_random
        self.rotation = rotation
        self.is_spinning = False
        self._pending: Optional[SpinResult] = None

    def start(self, power: float) -> SpinResult:
        if self.is_spinning:
            raise SpinInProgressError("Wheel is already spinning")
        result = resolve_spin(self.wheel, power, self.rotation, self.rand)
        self.is_spinning = True
        self._pending = result
        logger.info(
            f"Spinning {self.wheel.segment_count} segments at {round(result.power * 100)}% power"
        )
        return result

    def finish(self) -> Optional[SpinResult]:
        """Settle the wheel at the pending spin's final rotation."""
        result = self._pending
        if result is not None:
            self.rotation = result.final_rotation
        self.is_spinning = False
        self._pending = None
        return result

    def spin(self, power: float) -> SpinResult:
        """Resolve and immediately settle a spin (no animation)."""
        result = self.start(power)
        self.finish()
        return result

    def spin_until_winner(self, power: float, max_spins: int = 20) -> list:
        """
        Spin, chaining the rotation, until a non-RESPIN label lands.
        Returns every spin in order; the last one is the winner unless
        max_spins ran out first.
        """
        spins = []
        for _ in range(max_spins):
            result = self.spin(power)
            spins.append(result)
            if not result.is_respin:
                break
            logger.info("Landed on RESPIN, spinning again")
        return spins
