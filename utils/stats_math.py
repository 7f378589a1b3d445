"""Statistical utility functions: chi-square goodness of fit, transition matrices, deviations."""

import numpy as np
from scipy import stats


def chi_square_statistic(observed, expected=None) -> float:
    """
    Pearson chi-square statistic.
    With no expected counts, tests against a uniform split of the observed total.
    """
    observed = np.asarray(observed, dtype=float)
    if observed.size == 0:
        return 0.0
    if expected is None:
        expected = np.full_like(observed, observed.sum() / observed.size)
    expected = np.asarray(expected, dtype=float)
    mask = expected > 0
    return float((((observed - expected) ** 2)[mask] / expected[mask]).sum())


def chi_square_critical(dof: int, confidence: float = 0.95) -> float:
    """Critical value of the chi-square distribution (e.g. ~19.68 for dof=11 at 95%)."""
    if dof <= 0:
        return 0.0
    return float(stats.chi2.ppf(confidence, dof))


def chi_square_p_value(statistic: float, dof: int) -> float:
    """Upper-tail probability of the statistic; 1.0 when there is nothing to test."""
    if dof <= 0:
        return 1.0
    return float(stats.chi2.sf(statistic, dof))


def percentage_deviations(counts, total: int) -> np.ndarray:
    """Observed share minus expected share per bucket, in percentage points."""
    counts = np.asarray(counts, dtype=float)
    if total == 0 or counts.size == 0:
        return np.zeros_like(counts)
    expected_pct = 100.0 / counts.size
    return counts / total * 100.0 - expected_pct


def transition_matrix(sequence, n_states: int) -> np.ndarray:
    """Row-normalised matrix of P(next = j | current = i) from a state sequence."""
    counts = np.zeros((n_states, n_states), dtype=float)
    seq = np.asarray(sequence, dtype=int)
    if seq.size >= 2:
        np.add.at(counts, (seq[:-1], seq[1:]), 1.0)
    row_sums = counts.sum(axis=1, keepdims=True)
    with np.errstate(invalid="ignore", divide="ignore"):
        probs = np.where(row_sums > 0, counts / row_sums, 0.0)
    return probs


def max_transition_bias(matrix: np.ndarray) -> float:
    """Largest absolute gap between any visited transition probability and 1/N."""
    matrix = np.asarray(matrix, dtype=float)
    n = matrix.shape[0]
    if n == 0:
        return 0.0
    visited = matrix.sum(axis=1) > 0
    if not visited.any():
        return 0.0
    return float(np.abs(matrix[visited] - 1.0 / n).max())


def repeat_rate(sequence) -> float:
    """Fraction of consecutive pairs where the same state repeats."""
    seq = np.asarray(sequence, dtype=int)
    if seq.size < 2:
        return 0.0
    return float((seq[1:] == seq[:-1]).mean())
