"""Distribution statistics over simulated outcomes."""

from collections.abc import Sequence

import numpy as np


def percentiles(values: np.ndarray, points: Sequence[int]) -> dict[int, float]:
    """Values at each percentile, linearly interpolated between order statistics."""
    results = np.percentile(values, list(points), method="linear")
    return {int(p): float(v) for p, v in zip(points, results)}


def moments(values: np.ndarray) -> tuple[float, float, float, float]:
    """
    Population mean, standard deviation, skewness and excess kurtosis.

    Skewness and kurtosis are 0 for a distribution with no dispersion.
    """
    mean = float(np.mean(values))
    std = float(np.std(values))

    # identical outcomes can leave rounding noise in the std
    if std <= 1e-12 * max(1.0, abs(mean)):
        return mean, 0.0, 0.0, 0.0

    z = (values - mean) / std
    skewness = float(np.mean(z ** 3))
    kurtosis = float(np.mean(z ** 4) - 3.0)
    return mean, std, skewness, kurtosis


def share_below(values: np.ndarray, threshold: float) -> float:
    return float(np.mean(values < threshold))


def share_at_or_above(values: np.ndarray, threshold: float) -> float:
    return float(np.mean(values >= threshold))
