from __future__ import annotations
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence, TextIO
import numpy as np

from .activations import ActFunc
from .dense_layer import DenseLayer
from .random_source import resolve_rng, shuffle_in_place

EpochHook = Callable[[int, "NeuralNetwork"], None]

_DIVIDER = "-" * 80


class NeuralNetwork:
    def __init__(
        self,
        num_inputs: Optional[int] = None,
        num_hidden_nodes: Optional[int] = None,
        num_outputs: Optional[int] = None,
        hidden_act: ActFunc = ActFunc.RELU,
        output_act: ActFunc = ActFunc.RELU,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Builds one hidden layer by default when all three sizes are given;
        more can be stacked with add_hidden_layer(s). Leaving the sizes out
        yields an empty network that needs init() or add_first_hidden_layer().
        rng feeds weight init and shuffling (process-wide default if None).
        """
        self._rng = resolve_rng(rng)
        self._hidden_layers: List[DenseLayer] = []
        self._output_layer = DenseLayer(0, 0, output_act, rng=self._rng)
        self._train_in: List[np.ndarray] = []
        self._train_out: List[np.ndarray] = []
        self._train_order = np.zeros(0, dtype=np.intp)

        if num_inputs is not None and num_hidden_nodes is not None and num_outputs is not None:
            self.init(num_inputs, num_hidden_nodes, num_outputs, hidden_act, output_act)

    def __str__(self):
        desc = [f"Neural Network ({self.num_inputs} inputs):"]
        for layer in self._hidden_layers:
            desc.append(f"  hidden {layer!r}")
        desc.append(f"  output {self._output_layer!r}")
        return "\n".join(desc)

    # ----- Accessors -----
    @property
    def hidden_layers(self) -> List[DenseLayer]:
        return self._hidden_layers

    @property
    def output_layer(self) -> DenseLayer:
        return self._output_layer

    @property
    def output(self) -> np.ndarray:
        return self._output_layer.output

    @property
    def num_inputs(self) -> int:
        return self._hidden_layers[0].num_weights_per_node if self._hidden_layers else 0

    @property
    def num_outputs(self) -> int:
        return self._output_layer.num_nodes

    @property
    def num_hidden_layers(self) -> int:
        return len(self._hidden_layers)

    @property
    def num_training_sets(self) -> int:
        return int(self._train_order.shape[0])

    @property
    def configured(self) -> bool:
        return bool(self._hidden_layers)

    # ----- Architecture -----
    def init(
        self,
        num_inputs: int,
        num_hidden_nodes: int,
        num_outputs: int,
        hidden_act: ActFunc = ActFunc.RELU,
        output_act: ActFunc = ActFunc.RELU,
    ) -> None:
        """Replace the whole stack with one hidden layer and an output layer."""
        self._hidden_layers = []
        self.add_first_hidden_layer(num_hidden_nodes, num_inputs, hidden_act, num_outputs, output_act)

    def add_first_hidden_layer(
        self,
        num_nodes: int,
        num_inputs: int,
        act_func: ActFunc = ActFunc.RELU,
        num_outputs: Optional[int] = None,
        output_act: Optional[ActFunc] = None,
    ) -> None:
        """
        Give an empty network its input-facing layer. With num_outputs the
        output layer is rebuilt at that width (keeping its activation unless
        output_act is given); otherwise it keeps its current width.
        """
        if self._hidden_layers:
            raise RuntimeError("network already has an input-facing hidden layer; use init() to rebuild it")
        self._hidden_layers.append(DenseLayer(num_nodes, num_inputs, act_func, rng=self._rng))
        if num_outputs is None:
            self._resize_output_layer()
            return
        act = output_act if output_act is not None else self._output_layer.act_func
        self._output_layer.init(num_outputs, num_nodes, act)
        self._check_stack()

    def add_hidden_layer(self, num_nodes: int, act_func: ActFunc = ActFunc.RELU) -> None:
        self.add_hidden_layers(1, num_nodes, act_func)

    def add_hidden_layers(self, num_layers: int, num_nodes: int, act_func: ActFunc = ActFunc.RELU) -> None:
        if not self._hidden_layers:
            raise RuntimeError("call init() or add_first_hidden_layer() before stacking hidden layers")
        if num_layers <= 0:
            return
        for _ in range(num_layers):
            fan_in = self._last_hidden_layer().num_nodes
            self._hidden_layers.append(DenseLayer(num_nodes, fan_in, act_func, rng=self._rng))
        self._resize_output_layer()

    def _last_hidden_layer(self) -> DenseLayer:
        return self._hidden_layers[-1]

    def _resize_output_layer(self) -> None:
        # output weights are re-drawn, not migrated
        self._output_layer.resize(self._output_layer.num_nodes, self._last_hidden_layer().num_nodes)
        self._check_stack()

    def _check_stack(self) -> None:
        prev = self.num_inputs
        for idx, layer in enumerate(self._hidden_layers):
            if layer.num_nodes > 0 and layer.num_weights_per_node != prev:
                raise RuntimeError(f"hidden layer {idx} has fan-in {layer.num_weights_per_node}, expected {prev}")
            prev = layer.num_nodes
        out = self._output_layer
        if out.num_nodes > 0 and out.num_weights_per_node != prev:
            raise RuntimeError(f"output layer has fan-in {out.num_weights_per_node}, expected {prev}")

    # ----- Training data -----
    def add_training_data(self, train_in: Sequence[Sequence[float]], train_out: Sequence[Sequence[float]]) -> None:
        """
        Copy training sets. Extra entries in the longer of the two lists are
        dropped. The copies are discarded once train() has finished.
        """
        num_sets = min(len(train_in), len(train_out))
        self._train_in = [np.asarray(x, dtype=np.float64).reshape(-1) for x in train_in[:num_sets]]
        self._train_out = [np.asarray(y, dtype=np.float64).reshape(-1) for y in train_out[:num_sets]]
        self._train_order = np.arange(num_sets, dtype=np.intp)

    def remove_training_data(self) -> None:
        self._train_in = []
        self._train_out = []
        self._train_order = np.zeros(0, dtype=np.intp)

    # ----- Training -----
    def train(self, num_epochs: int, learning_rate: float = 0.01, on_epoch_end: Optional[EpochHook] = None) -> bool:
        """
        Online SGD over the stored sets: every epoch reshuffles the order and
        updates the weights after each single example.

        Returns False (and touches nothing) when the learning rate is not
        positive or no training sets are stored.
        """
        if not self._learning_rate_valid(learning_rate) or self.num_training_sets == 0:
            return False
        for epoch in range(int(num_epochs)):
            shuffle_in_place(self._rng, self._train_order)
            self._execute_epoch(learning_rate)
            if on_epoch_end is not None:
                on_epoch_end(epoch, self)
        self.remove_training_data()
        return True

    @staticmethod
    def _learning_rate_valid(learning_rate: float) -> bool:
        return learning_rate > 0

    def _execute_epoch(self, learning_rate: float) -> None:
        for i in self._train_order:
            self._feedforward(self._train_in[i])
            self._backpropagate(self._train_out[i])
            self._optimize(self._train_in[i], learning_rate)

    def _feedforward(self, input: Sequence[float]) -> None:
        if not self._hidden_layers:
            raise RuntimeError("network has no layers; call init() first")
        x = input
        for layer in self._hidden_layers:
            x = layer.feedforward(x)
        self._output_layer.feedforward(x)

    def _backpropagate(self, reference: Sequence[float]) -> None:
        self._output_layer.backpropagate(reference)
        downstream = self._output_layer
        for layer in reversed(self._hidden_layers):
            layer.backpropagate(downstream)
            downstream = layer

    def _optimize(self, input: Sequence[float], learning_rate: float) -> None:
        x = input
        for layer in self._hidden_layers:
            layer.optimize(x, learning_rate)
            x = layer.output
        self._output_layer.optimize(x, learning_rate)

    # ----- Inference -----
    def predict(self, input: Sequence[float]) -> np.ndarray:
        self._feedforward(input)
        return self._output_layer.output.copy()

    def print_predictions(
        self,
        inputs: Sequence[Sequence[float]],
        num_decimals: int = 1,
        stream: Optional[TextIO] = None,
    ) -> None:
        """Predict every input set and print it next to its output."""
        out = stream if stream is not None else sys.stdout
        out.write("\n" + _DIVIDER)
        for sample in inputs:
            out.write("\nInput:\t")
            self._print_line(sample, num_decimals, out)
            out.write("Output:\t")
            self._print_line(self.predict(sample), num_decimals, out)
        out.write(_DIVIDER + "\n\n")

    @staticmethod
    def _print_line(data: Sequence[float], num_decimals: int, stream: TextIO) -> None:
        stream.write("".join(f"{float(v):.{num_decimals}f} " for v in data) + "\n")

    # ----- Checkpointing -----
    def get_state(self) -> Dict[str, Any]:
        return {
            "hidden_layers": [layer.get_state() for layer in self._hidden_layers],
            "output_layer": self._output_layer.get_state(),
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        hidden: List[DenseLayer] = []
        for layer_state in state["hidden_layers"]:
            layer = DenseLayer(0, 0, rng=self._rng)
            layer.set_state(layer_state)
            hidden.append(layer)
        output = DenseLayer(0, 0, rng=self._rng)
        output.set_state(state["output_layer"])

        previous = (self._hidden_layers, self._output_layer)
        self._hidden_layers, self._output_layer = hidden, output
        try:
            self._check_stack()
        except RuntimeError:
            self._hidden_layers, self._output_layer = previous
            raise
