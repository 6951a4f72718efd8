from __future__ import annotations
from enum import Enum
import numpy as np


class ActFunc(str, Enum):
    """Activation applied to every node of a dense layer."""
    RELU = "relu"
    TANH = "tanh"


def relu(x: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
    return np.maximum(x, 0.0, out=out)


def tanh(x: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
    return np.tanh(x, out=out)


def relu_delta(output: np.ndarray) -> np.ndarray:
    # evaluated on the activated output, not the weighted sum
    return (output > 0.0).astype(np.float64)


def tanh_delta(output: np.ndarray) -> np.ndarray:
    return 1.0 - output * output


def activate(x: np.ndarray, act_func: ActFunc, out: np.ndarray | None = None) -> np.ndarray:
    return relu(x, out=out) if act_func == ActFunc.RELU else tanh(x, out=out)


def delta(output: np.ndarray, act_func: ActFunc) -> np.ndarray:
    return relu_delta(output) if act_func == ActFunc.RELU else tanh_delta(output)
