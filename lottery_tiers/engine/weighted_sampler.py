"""Weighted sampling primitives used by the ticket generator.

Weights are shaped in two steps before a draw:

1. temperature:          w' = w ** (1 / T)
2. diminishing returns:  w'' = w' / (1 + alpha * used)

T < 1 sharpens selection toward the heaviest candidates, T > 1 flattens
toward uniform. ``used`` is how many times the value was already drawn in
the current generation call.
"""

import math
from collections.abc import Sequence

import numpy as np

NO_CANDIDATE = -1
MIN_TEMPERATURE = 1e-4


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Seedable random source passed explicitly into every sampling call."""
    return np.random.default_rng(seed)


def apply_temperature(base_weight: float, temperature: float) -> float:
    if base_weight <= 0:
        return 0.0
    try:
        return math.exp(math.log(base_weight) / max(MIN_TEMPERATURE, temperature))
    except OverflowError:
        return math.inf


def apply_diminishing_returns(weight: float, used_count: int, alpha: float) -> float:
    return weight / (1.0 + max(0.0, alpha) * max(0, used_count))


def pick_index_by_weight(weights: Sequence[float], rng: np.random.Generator) -> int:
    """Pick one index with probability proportional to its weight.

    Returns NO_CANDIDATE when the list is empty or the total weight is 0.
    Infinite weights are picked uniformly among themselves.
    """
    if len(weights) == 0:
        return NO_CANDIDATE

    w = np.clip(np.asarray(weights, dtype=np.float64), 0.0, None)
    if np.isinf(w).any():
        # Infinite weights share the whole mass
        w = np.isinf(w).astype(np.float64)
    cumulative = np.cumsum(w)
    total = cumulative[-1]
    if total <= 0.0:
        return NO_CANDIDATE

    r = rng.random() * total
    idx = int(np.searchsorted(cumulative, r, side="right"))
    return min(idx, len(w) - 1)
