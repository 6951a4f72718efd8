from __future__ import annotations
from collections import deque
from typing import Deque, Dict, Optional, Sequence
import numpy as np

class EMA:
    """Exponential moving average."""
    def __init__(self, alpha: float):
        self.alpha = alpha
        self.value: Optional[float] = None
    def update(self, x: float) -> float:
        self.value = x if self.value is None else (self.alpha * x + (1 - self.alpha) * self.value)
        return self.value

class WindowedStat:
    """Fixed-window mean/min/max."""
    def __init__(self, window: int):
        self.window = window
        self.buf: Deque[float] = deque(maxlen=window)
    def add(self, x: float) -> None:
        self.buf.append(float(x))
    def summary(self) -> Dict[str, float]:
        if not self.buf:
            return {"mean": 0.0, "min": 0.0, "max": 0.0}
        b = list(self.buf)
        return {"mean": sum(b) / len(b), "min": min(b), "max": max(b)}

def mean_squared_error(network, inputs: Sequence[Sequence[float]], targets: Sequence[Sequence[float]]) -> float:
    """
    Mean over all sets and output nodes of (target - prediction)^2.
    Only the overlapping part of each target/output pair is compared.
    """
    total, count = 0.0, 0
    for x, y in zip(inputs, targets):
        pred = network.predict(x)
        t = np.asarray(y, dtype=np.float64).reshape(-1)
        n = min(pred.shape[0], t.shape[0])
        diff = t[:n] - pred[:n]
        total += float(diff @ diff)
        count += n
    return total / count if count else 0.0
