import math
import random

import pytest

from engine.geometry import TWO_PI, resolve_index, normalize_angle_difference, angle_from_point
from engine.spin import (
    WheelSpec, EmptyWheelError, SpinController, SpinInProgressError,
    resolve_spin, target_rotation, clamp_power,
)

EIGHT = WheelSpec(("Name1", "Name2", "Name3", "Name4", "Name5", "Name6", "Name7", "RESPIN"))


def fixed(value):
    return lambda: value


def test_eight_segment_example_follows_formula():
    result = resolve_spin(EIGHT, power=0.5, current_rotation=0.0, rand=fixed(0.37))
    assert result.final_rotation == pytest.approx(TWO_PI * 8.74)
    # 8.74 turns leaves 0.74 of a turn, so the pointer reads 0.26 of a turn back
    assert result.index == 2
    assert result.label == "Name3"
    assert not result.is_respin


def test_single_segment_always_wins():
    wheel = WheelSpec(("Solo",))
    for draw in (0.0, 0.25, 0.5, 0.999999):
        for power in (0.0, 0.3, 1.0):
            result = resolve_spin(wheel, power, current_rotation=12.3, rand=fixed(draw))
            assert result.index == 0
            assert result.label == "Solo"


def test_empty_wheel_is_rejected():
    with pytest.raises(EmptyWheelError):
        WheelSpec(())
    with pytest.raises(ValueError):
        WheelSpec.from_names([])


def test_resolution_is_pure():
    a = resolve_spin(EIGHT, 0.8, 3.1, fixed(0.42))
    b = resolve_spin(EIGHT, 0.8, 3.1, fixed(0.42))
    assert a == b


def test_power_is_clamped():
    assert clamp_power(-1) == 0.0
    assert clamp_power(7) == 1.0
    assert resolve_spin(EIGHT, 5.0, 0.0, fixed(0.1)).power == 1.0


def test_rotation_always_moves_forward():
    for power in (0.0, 0.5, 1.0):
        for draw in (0.0, 0.5, 0.99):
            start = 17.0
            final = target_rotation(power, start, draw)
            turns = (final - start) / TWO_PI
            assert 3.0 <= turns < 15.0


def test_index_at_exact_boundaries():
    assert resolve_index(0.0, 8) == 0
    # A quarter turn forward puts the last quarter of the wheel under the pointer
    assert resolve_index(TWO_PI / 4, 4) == 3
    assert resolve_index(-TWO_PI / 4, 4) == 1
    # Floating noise near a full turn must not produce index N
    assert resolve_index(TWO_PI - 1e-18, 5) in range(5)


def test_every_segment_is_reachable():
    wheel = WheelSpec(tuple(f"N{i}" for i in range(12)))
    seen = {resolve_spin(wheel, 0.5, 0.0, fixed(k / 240)).index for k in range(240)}
    assert seen == set(range(12))


def test_controller_rejects_reentrant_spin():
    controller = SpinController(EIGHT, rand=fixed(0.2))
    controller.start(0.5)
    assert controller.is_spinning
    with pytest.raises(SpinInProgressError):
        controller.start(0.5)
    controller.finish()
    assert not controller.is_spinning
    controller.start(0.5)


def test_controller_chains_rotation():
    controller = SpinController(EIGHT, rand=fixed(0.3), rotation=1.0)
    first = controller.spin(0.4)
    assert first.start_rotation == 1.0
    second = controller.spin(0.4)
    assert second.start_rotation == first.final_rotation
    assert controller.rotation == second.final_rotation


def test_spin_until_winner_stops_on_name():
    wheel = WheelSpec(("RESPIN", "A", "B", "RESPIN"))
    controller = SpinController(wheel, rand=random.Random(4).random)
    spins = controller.spin_until_winner(0.5)
    assert spins
    assert not spins[-1].is_respin
    assert all(s.is_respin for s in spins[:-1])


def test_spin_until_winner_gives_up_on_all_respin_wheel():
    controller = SpinController(WheelSpec(("RESPIN",)), rand=fixed(0.5))
    spins = controller.spin_until_winner(0.5, max_spins=3)
    assert len(spins) == 3
    assert spins[-1].is_respin


def test_duration_depends_on_power():
    slow = resolve_spin(EIGHT, 0.0, 0.0, fixed(0.5))
    fast = resolve_spin(EIGHT, 1.0, 0.0, fixed(0.5))
    assert slow.duration_ms == 8000
    assert fast.duration_ms == 4000


def test_normalize_angle_difference_wraps():
    assert normalize_angle_difference(3 * math.pi / 2) == pytest.approx(-math.pi / 2)
    assert normalize_angle_difference(-3 * math.pi / 2) == pytest.approx(math.pi / 2)
    assert normalize_angle_difference(0.3) == 0.3


def test_angle_from_point_is_non_negative():
    assert angle_from_point(0, 0, 1, 0) == 0.0
    assert angle_from_point(0, 0, 0, -1) == pytest.approx(3 * math.pi / 2)
