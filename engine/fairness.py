"""Fairness self-tests: uniformity, independence from power, and chained-spin correlation."""

import random
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from config import (
    FAIRNESS_TRIALS, FAIRNESS_CONFIDENCE, FAIRNESS_POWER_LEVELS,
    TRANSITION_BIAS_THRESHOLD, RESPIN_LABEL,
)
from engine.spin import WheelSpec, resolve_spin
from utils.stats_math import (
    chi_square_statistic, chi_square_critical, chi_square_p_value,
    percentage_deviations, transition_matrix, max_transition_bias, repeat_rate,
)

logger = logging.getLogger(__name__)


@dataclass
class UniformityReport:
    trials: int
    counts: np.ndarray
    statistic: float
    dof: int
    critical_value: float
    p_value: float
    power: Optional[float] = None

    @property
    def is_fair(self) -> bool:
        return self.statistic <= self.critical_value


@dataclass
class PowerIndependenceReport:
    powers: list
    counts: np.ndarray          # rows = power levels, columns = segments
    statistic: float
    dof: int
    p_value: float
    confidence: float
    per_power: list = field(default_factory=list)

    @property
    def is_independent(self) -> bool:
        return self.p_value >= 1.0 - self.confidence


@dataclass
class SerialCorrelationReport:
    spins: int
    repeat_rate: float
    expected_repeat_rate: float
    max_transition_bias: float
    threshold: float
    matrix: np.ndarray

    @property
    def is_uncorrelated(self) -> bool:
        return (
            self.max_transition_bias <= self.threshold
            and abs(self.repeat_rate - self.expected_repeat_rate) <= self.threshold
        )


class FairnessAnalyzer:
    """Monte Carlo checks of the spin resolution against a seeded or system RNG."""

    def __init__(self, wheel: WheelSpec, seed: Optional[int] = None,
                 confidence: float = FAIRNESS_CONFIDENCE):
        self.wheel = wheel
        self.rng = random.Random(seed)
        self.confidence = confidence

    def simulate(self, trials: int, power: Optional[float] = None,
                 current_rotation: float = 0.0) -> np.ndarray:
        """
        Winning-index counts over independent spins from the same resting angle.
        A power of None draws a fresh power per spin, like a user moving the slider.
        """
        counts = np.zeros(self.wheel.segment_count, dtype=int)
        for _ in range(trials):
            p = self.rng.random() if power is None else power
            result = resolve_spin(self.wheel, p, current_rotation, self.rng.random)
            counts[result.index] += 1
        return counts

    def simulate_chain(self, spins: int, power: Optional[float] = None) -> np.ndarray:
        """Winning indices of consecutive spins, each starting where the last one stopped."""
        indices = np.zeros(spins, dtype=int)
        rotation = 0.0
        for i in range(spins):
            p = self.rng.random() if power is None else power
            result = resolve_spin(self.wheel, p, rotation, self.rng.random)
            indices[i] = result.index
            rotation = result.final_rotation
        return indices

    def _uniformity_from_counts(self, counts: np.ndarray,
                                power: Optional[float] = None) -> UniformityReport:
        dof = len(counts) - 1
        statistic = chi_square_statistic(counts)
        return UniformityReport(
            trials=int(counts.sum()),
            counts=counts,
            statistic=statistic,
            dof=dof,
            critical_value=chi_square_critical(dof, self.confidence),
            p_value=chi_square_p_value(statistic, dof),
            power=power,
        )

    def uniformity(self, trials: int = FAIRNESS_TRIALS,
                   power: Optional[float] = None) -> UniformityReport:
        """Chi-square goodness of fit of winning indices against 1/N each."""
        counts = self.simulate(trials, power)
        report = self._uniformity_from_counts(counts, power)
        logger.info(
            f"Uniformity over {trials} spins: chi2={report.statistic:.2f} "
            f"(dof={report.dof}, critical={report.critical_value:.2f}) "
            f"-> {'fair' if report.is_fair else 'NOT fair'}"
        )
        return report

    def power_independence(self, trials: int = FAIRNESS_TRIALS,
                           powers: Sequence[float] = FAIRNESS_POWER_LEVELS) -> PowerIndependenceReport:
        """Contingency test that the winner distribution is the same at every power level."""
        powers = list(powers)
        rows = [self.simulate(trials, p) for p in powers]
        matrix = np.vstack(rows)
        per_power = [self._uniformity_from_counts(row, p) for row, p in zip(rows, powers)]

        # Segments never hit at any power carry no information and break the expected table
        observed = matrix[:, matrix.sum(axis=0) > 0]
        if observed.shape[1] < 2 or len(powers) < 2:
            statistic, p_value, dof = 0.0, 1.0, 0
        else:
            statistic, p_value, dof, _ = stats.chi2_contingency(observed)
        report = PowerIndependenceReport(
            powers=powers,
            counts=matrix,
            statistic=float(statistic),
            dof=int(dof),
            p_value=float(p_value),
            confidence=self.confidence,
            per_power=per_power,
        )
        logger.info(
            f"Power independence across {powers}: chi2={report.statistic:.2f} "
            f"p={report.p_value:.4f} -> {'independent' if report.is_independent else 'DEPENDENT'}"
        )
        return report

    def serial_correlation(self, spins: int = FAIRNESS_TRIALS, power: Optional[float] = None,
                           threshold: float = TRANSITION_BIAS_THRESHOLD) -> SerialCorrelationReport:
        """Repeat rate and transition-matrix bias for chained spins."""
        n = self.wheel.segment_count
        indices = self.simulate_chain(spins, power)
        matrix = transition_matrix(indices, n)
        # A one-segment wheel always repeats and has nothing to compare
        bias = 0.0 if n == 1 else max_transition_bias(matrix)
        report = SerialCorrelationReport(
            spins=spins,
            repeat_rate=repeat_rate(indices),
            expected_repeat_rate=1.0 / n,
            max_transition_bias=bias,
            threshold=threshold,
            matrix=matrix,
        )
        logger.info(
            f"Chained spins: repeat rate {report.repeat_rate:.4f} "
            f"(expected {report.expected_repeat_rate:.4f}), "
            f"max transition bias {report.max_transition_bias:.4f}"
        )
        return report

    def label_summary(self, counts: np.ndarray) -> pd.DataFrame:
        """Per-label hits, share and deviation; RESPIN tiles are pooled."""
        total = int(counts.sum())
        df = pd.DataFrame({"label": list(self.wheel.segments), "hits": counts, "slots": 1})
        df = df.groupby("label", sort=False, as_index=False).agg(hits=("hits", "sum"), slots=("slots", "sum"))
        n = self.wheel.segment_count
        df["pct"] = (df["hits"] / total * 100) if total else 0.0
        df["expected_pct"] = df["slots"] / n * 100
        df["deviation"] = df["pct"] - df["expected_pct"]
        df["is_respin"] = df["label"] == RESPIN_LABEL
        return df.sort_values("hits", ascending=False).reset_index(drop=True)

    def deviation_stats(self, counts: np.ndarray) -> dict:
        """Max and mean absolute per-slot deviation, in percentage points."""
        devs = np.abs(percentage_deviations(counts, int(counts.sum())))
        if devs.size == 0:
            return {"max": 0.0, "mean": 0.0}
        return {"max": float(devs.max()), "mean": float(devs.mean())}
