from __future__ import annotations
from typing import Any, Dict, Optional, Sequence, Union
import numpy as np

from .activations import ActFunc, activate, delta
from .random_source import resolve_rng, uniform_matrix, uniform_vector


class DenseLayer:
    """
    Fully-connected layer with per-node state kept between passes.

    weights: (num_nodes, num_weights_per_node), one row per node
    bias, output, error: (num_nodes,)

    feedforward() fills `output`, backpropagate() fills `error`, and optimize()
    consumes both to nudge weights and biases. Buffers are allocated once per
    resize and overwritten in place afterwards.
    """

    def __init__(
        self,
        num_nodes: int = 0,
        num_weights_per_node: int = 0,
        act_func: ActFunc = ActFunc.RELU,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._rng = resolve_rng(rng)
        self.init(num_nodes, num_weights_per_node, act_func)

    # ----- Accessors -----
    @property
    def num_nodes(self) -> int:
        return int(self.output.shape[0])

    @property
    def num_weights_per_node(self) -> int:
        return int(self.weights.shape[1]) if self.num_nodes > 0 else 0

    @property
    def act_func(self) -> ActFunc:
        return self._act_func

    def __repr__(self) -> str:
        return f"DenseLayer({self.num_weights_per_node} → {self.num_nodes}, {self._act_func.value})"

    # ----- Setup -----
    def init(self, num_nodes: int, num_weights_per_node: int, act_func: ActFunc = ActFunc.RELU) -> None:
        """Set the activation and reallocate everything; nothing from before survives."""
        self._act_func = ActFunc(act_func)
        self.resize(num_nodes, num_weights_per_node)

    def resize(self, num_nodes: int, num_weights_per_node: int) -> None:
        num_nodes, num_weights_per_node = int(num_nodes), int(num_weights_per_node)
        if num_nodes < 0 or num_weights_per_node < 0:
            raise ValueError(f"layer dimensions must be >= 0, got ({num_nodes}, {num_weights_per_node})")
        self.weights = uniform_matrix(self._rng, num_nodes, num_weights_per_node)
        self.bias = uniform_vector(self._rng, num_nodes)
        self.output = np.zeros(num_nodes, dtype=np.float64)
        self.error = np.zeros(num_nodes, dtype=np.float64)

    # ----- Passes -----
    def feedforward(self, input: Sequence[float]) -> np.ndarray:
        x = np.asarray(input, dtype=np.float64).reshape(-1)
        n = min(self.num_weights_per_node, x.shape[0])
        z = self.bias + self.weights[:, :n] @ x[:n]
        activate(z, self._act_func, out=self.output)
        return self.output

    def backpropagate(self, reference: Union[Sequence[float], "DenseLayer"]) -> None:
        """
        Output layer: pass the target vector, error = (target - output) * act'(output).
        Hidden layer: pass the downstream layer, error = Σ next.error[j] * next.weights[j][i],
        scaled by act'(output). Nodes without a counterpart get zero error.
        """
        if isinstance(reference, DenseLayer):
            raw = self._raw_error_from(reference)
        else:
            raw = self._raw_error_against(reference)
        np.multiply(raw, delta(self.output, self._act_func), out=self.error)

    def _raw_error_against(self, target: Sequence[float]) -> np.ndarray:
        t = np.asarray(target, dtype=np.float64).reshape(-1)
        n = min(self.num_nodes, t.shape[0])
        raw = np.zeros(self.num_nodes, dtype=np.float64)
        raw[:n] = t[:n] - self.output[:n]
        return raw

    def _raw_error_from(self, next_layer: "DenseLayer") -> np.ndarray:
        n = min(self.num_nodes, next_layer.num_weights_per_node)
        raw = np.zeros(self.num_nodes, dtype=np.float64)
        raw[:n] = next_layer.error @ next_layer.weights[:, :n]
        return raw

    def optimize(self, input: Sequence[float], learning_rate: float) -> None:
        x = np.asarray(input, dtype=np.float64).reshape(-1)
        n = min(self.num_weights_per_node, x.shape[0])
        step = self.error * learning_rate
        self.bias += step
        self.weights[:, :n] += np.outer(step, x[:n])

    # ----- Checkpointing -----
    def get_state(self) -> Dict[str, Any]:
        return {
            "act_func": self._act_func.value,
            "weights": self.weights.tolist(),
            "bias": self.bias.tolist(),
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        weights = np.asarray(state["weights"], dtype=np.float64)
        bias = np.asarray(state["bias"], dtype=np.float64).reshape(-1)
        if weights.size == 0:
            weights = weights.reshape(bias.shape[0], 0)
        if weights.ndim != 2 or weights.shape[0] != bias.shape[0]:
            raise ValueError(f"weights {weights.shape} do not match bias {bias.shape}")
        self._act_func = ActFunc(state["act_func"])
        self.weights = weights
        self.bias = bias
        self.output = np.zeros(bias.shape[0], dtype=np.float64)
        self.error = np.zeros(bias.shape[0], dtype=np.float64)
