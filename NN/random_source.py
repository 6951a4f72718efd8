# NN/random_source.py
from __future__ import annotations
import time
from typing import Optional
import numpy as np

_default_rng: Optional[np.random.Generator] = None


def default_rng() -> np.random.Generator:
    """
    Process-wide generator used when a layer or network is not handed one.
    Created on first use and seeded from the clock, so runs differ unless
    seed_default_rng() is called first.
    """
    global _default_rng
    if _default_rng is None:
        _default_rng = np.random.default_rng(time.time_ns())
    return _default_rng


def seed_default_rng(seed: Optional[int]) -> np.random.Generator:
    """Replace the process-wide generator with a freshly seeded one."""
    global _default_rng
    _default_rng = np.random.default_rng(seed)
    return _default_rng


def resolve_rng(rng: Optional[np.random.Generator] = None) -> np.random.Generator:
    return rng if rng is not None else default_rng()


def uniform_vector(rng: np.random.Generator, size: int, low: float = 0.0, high: float = 1.0) -> np.ndarray:
    return rng.uniform(low, high, size=int(size))


def uniform_matrix(rng: np.random.Generator, rows: int, cols: int,
                   low: float = 0.0, high: float = 1.0) -> np.ndarray:
    return rng.uniform(low, high, size=(int(rows), int(cols)))


def shuffle_in_place(rng: np.random.Generator, values: list) -> None:
    rng.shuffle(values)
