"""Presentation-only spin animation: duration, quartic ease-out, frames and ticks."""

from dataclasses import dataclass
from typing import Iterator, Optional

from config import (
    MIN_SPIN_DURATION_MS, POWER_DURATION_MS, FRAME_INTERVAL_MS,
    TICK_MIN_VOLUME, TICK_MAX_VOLUME,
    MOMENTUM_FRICTION, MOMENTUM_MIN_START, MOMENTUM_MIN_VELOCITY,
)
from engine.geometry import resolve_index


def spin_duration_ms(power: float) -> float:
    """Slower power spins longer: 8000 ms at power 0 down to 4000 ms at power 1."""
    power = min(1.0, max(0.0, float(power)))
    return MIN_SPIN_DURATION_MS + (1.0 - power) * POWER_DURATION_MS


def ease_out_quart(progress: float) -> float:
    progress = min(1.0, max(0.0, progress))
    return 1.0 - (1.0 - progress) ** 4


def rotation_at(start: float, final: float, elapsed_ms: float, duration_ms: float) -> float:
    """Displayed rotation after elapsed_ms; exactly `final` once the spin is over."""
    if duration_ms <= 0 or elapsed_ms >= duration_ms:
        return final
    eased = ease_out_quart(elapsed_ms / duration_ms)
    return start + (final - start) * eased


def tick_volume(eased_progress: float) -> float:
    """Segment-crossing click volume, louder while the wheel is fast."""
    speed = 1.0 - eased_progress
    volume = TICK_MIN_VOLUME + speed * (TICK_MAX_VOLUME - TICK_MIN_VOLUME)
    return max(TICK_MIN_VOLUME, min(TICK_MAX_VOLUME, volume))


@dataclass(frozen=True)
class Frame:
    elapsed_ms: float
    rotation: float
    segment: int
    tick_volume: Optional[float]  # None when no segment boundary was crossed

    @property
    def is_tick(self) -> bool:
        return self.tick_volume is not None


class SpinAnimation:
    """Frame-by-frame interpolation of a resolved spin."""

    def __init__(self, start: float, final: float, duration_ms: float, segment_count: int):
        self.start = start
        self.final = final
        self.duration_ms = duration_ms
        self.segment_count = segment_count

    @classmethod
    def for_result(cls, result, segment_count: int) -> "SpinAnimation":
        return cls(result.start_rotation, result.final_rotation, result.duration_ms, segment_count)

    def rotation(self, elapsed_ms: float) -> float:
        return rotation_at(self.start, self.final, elapsed_ms, self.duration_ms)

    def frames(self, interval_ms: float = FRAME_INTERVAL_MS) -> Iterator[Frame]:
        """Yield frames until the wheel lands; the last frame is always at `final`."""
        last_segment = -1
        elapsed = 0.0
        while True:
            done = elapsed >= self.duration_ms
            rotation = self.final if done else self.rotation(elapsed)
            segment = resolve_index(rotation, self.segment_count)
            volume = None
            if segment != last_segment:
                eased = 1.0 if done else ease_out_quart(elapsed / self.duration_ms)
                volume = tick_volume(eased)
                last_segment = segment
            yield Frame(elapsed, rotation, segment, volume)
            if done:
                return
            elapsed = min(elapsed + interval_ms, self.duration_ms)


def momentum_step(velocity: float, dt: float) -> float:
    """Velocity (rad/s) after dt seconds of friction, normalised to 60 fps."""
    return velocity * MOMENTUM_FRICTION ** (dt * 60)


def coast(velocity: float, dt: float = 1 / 60) -> Iterator[float]:
    """
    Rotation deltas of a wheel released from a drag at `velocity` rad/s.
    Nothing is yielded for flicks slower than the start threshold.
    """
    if abs(velocity) <= MOMENTUM_MIN_START:
        return
    while True:
        velocity = momentum_step(velocity, dt)
        if abs(velocity) <= MOMENTUM_MIN_VELOCITY:
            return
        yield velocity * dt
