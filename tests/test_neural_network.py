# tests/test_neural_network.py
import io
import numpy as np
import pytest

from NN.activations import ActFunc
from NN.neural_network import NeuralNetwork
from training.metrics import mean_squared_error

COUNTER_IN = [[0, 0, 0], [0, 0, 1], [0, 1, 0], [0, 1, 1],
              [1, 0, 0], [1, 0, 1], [1, 1, 0], [1, 1, 1]]
COUNTER_OUT = [[0, 0], [0, 1], [0, 1], [1, 0],
               [0, 1], [1, 0], [1, 0], [1, 1]]

def _weights(net):
    layers = net.hidden_layers + [net.output_layer]
    return [(l.weights.copy(), l.bias.copy()) for l in layers]

def test_init_builds_one_hidden_and_output_layer(network_factory):
    net = network_factory(3, 4, 2, ActFunc.TANH, ActFunc.RELU)
    assert net.num_inputs == 3
    assert net.num_outputs == 2
    assert net.num_hidden_layers == 1
    assert net.hidden_layers[0].act_func is ActFunc.TANH
    assert net.output_layer.num_weights_per_node == 4
    assert net.num_training_sets == 0

def test_init_again_replaces_stack(network_factory):
    net = network_factory(3, 4, 2)
    net.add_hidden_layers(2, 5)
    net.init(2, 6, 1)
    assert net.num_hidden_layers == 1
    assert (net.num_inputs, net.num_outputs) == (2, 1)
    assert net.output_layer.num_weights_per_node == 6

def test_uninitialized_network(network_factory):
    net = network_factory()
    assert not net.configured
    assert net.num_inputs == 0 and net.num_hidden_layers == 0
    with pytest.raises(RuntimeError):
        net.add_hidden_layer(3)
    with pytest.raises(RuntimeError):
        net.predict([1.0])

def test_add_first_hidden_layer_configures(network_factory):
    net = network_factory()
    net.add_first_hidden_layer(5, 3, ActFunc.TANH)
    assert net.configured
    assert net.num_inputs == 3
    assert net.output_layer.num_weights_per_node == 0  # no output nodes yet
    with pytest.raises(RuntimeError):
        net.add_first_hidden_layer(2, 2)

def test_add_first_hidden_layer_with_output_width(network_factory):
    net = network_factory()
    net.add_first_hidden_layer(4, 2, ActFunc.TANH, num_outputs=1, output_act=ActFunc.TANH)
    assert (net.num_inputs, net.num_outputs) == (2, 1)
    assert net.output_layer.num_weights_per_node == 4
    assert net.output_layer.act_func is ActFunc.TANH
    net.add_training_data([[0, 1], [1, 0]], [[1], [0]])
    assert net.train(3, 0.1)
    assert net.predict([0, 1]).shape == (1,)

def test_add_hidden_layer_rewires_output(network_factory):
    net = network_factory(3, 4, 2)
    net.add_hidden_layer(7, ActFunc.TANH)
    assert net.num_hidden_layers == 2
    assert net.hidden_layers[1].num_weights_per_node == 4
    assert net.output_layer.num_weights_per_node == 7
    assert net.num_outputs == 2

def test_add_hidden_layers_chains_fan_in(network_factory):
    net = network_factory(3, 4, 2)
    net.add_hidden_layers(3, 6)
    assert net.num_hidden_layers == 4
    fan_ins = [l.num_weights_per_node for l in net.hidden_layers]
    assert fan_ins == [3, 4, 6, 6]
    assert net.output_layer.num_weights_per_node == 6
    assert net.predict([1, 0, 1]).shape == (2,)

def test_add_zero_hidden_layers_is_noop(network_factory):
    net = network_factory(3, 4, 2)
    before = net.output_layer.weights.copy()
    net.add_hidden_layers(0, 6)
    assert net.num_hidden_layers == 1
    assert np.array_equal(net.output_layer.weights, before)

def test_output_weights_redrawn_on_stack_change(network_factory):
    net = network_factory(3, 4, 2)
    before = net.output_layer.weights.copy()
    net.add_hidden_layer(4)
    assert net.output_layer.weights.shape == before.shape
    assert not np.array_equal(net.output_layer.weights, before)

def test_add_training_data_truncates_to_shorter(network_factory):
    net = network_factory(2, 2, 1)
    net.add_training_data([[0, 0], [0, 1], [1, 0], [1, 1], [2, 2]], [[0], [1], [1]])
    assert net.num_training_sets == 3
    net.add_training_data([[0, 0]], [[0], [1]])
    assert net.num_training_sets == 1

@pytest.mark.parametrize("lr", [0.0, -0.5])
def test_train_rejects_bad_learning_rate(network_factory, lr):
    net = network_factory(2, 3, 1)
    net.add_training_data([[0, 1], [1, 0]], [[1], [1]])
    before = _weights(net)
    calls = []
    assert net.train(100, lr, on_epoch_end=lambda e, n: calls.append(e)) is False
    assert net.num_training_sets == 2
    assert calls == []
    for (w0, b0), (w1, b1) in zip(before, _weights(net)):
        assert np.array_equal(w0, w1) and np.array_equal(b0, b1)

def test_train_without_data_fails(network_factory):
    net = network_factory(2, 3, 1)
    assert net.train(10, 0.1) is False

def test_train_consumes_data_and_calls_hook(network_factory):
    net = network_factory(2, 3, 1)
    net.add_training_data([[0, 1], [1, 0], [1, 1]], [[1], [1], [0]])
    seen = []
    assert net.train(4, 0.1, on_epoch_end=lambda e, n: seen.append((e, n.num_training_sets))) is True
    assert seen == [(0, 3), (1, 3), (2, 3), (3, 3)]
    assert net.num_training_sets == 0
    assert net.train(1, 0.1) is False

def test_single_update_hand_computed(network_factory):
    net = network_factory(1, 1, 1)
    net.hidden_layers[0].weights[:] = [[0.5]]
    net.hidden_layers[0].bias[:] = [0.0]
    net.output_layer.weights[:] = [[2.0]]
    net.output_layer.bias[:] = [0.0]
    net.add_training_data([[1.0]], [[2.0]])
    assert net.train(1, 0.1)
    # h = 0.5, o = 1.0, output error = 1.0, hidden error = 1.0 * 2.0
    assert net.hidden_layers[0].bias[0] == pytest.approx(0.2)
    assert net.hidden_layers[0].weights[0, 0] == pytest.approx(0.7)
    assert net.output_layer.bias[0] == pytest.approx(0.1)
    assert net.output_layer.weights[0, 0] == pytest.approx(2.05)

def test_predict_forward_pass(summing_network):
    assert summing_network.predict([1.0, 2.0]).tolist() == pytest.approx([3.5])
    assert summing_network.output.tolist() == pytest.approx([3.5])

def test_predict_returns_independent_copies(summing_network):
    first = summing_network.predict([0.0, 0.0])
    second = summing_network.predict([1.0, 1.0])
    assert first is not second
    assert first.tolist() == pytest.approx([0.5])
    second[:] = 42.0
    assert summing_network.output.tolist() == pytest.approx([2.5])

def test_predict_is_idempotent(network_factory):
    net = network_factory(3, 5, 2, ActFunc.TANH)
    net.add_hidden_layer(4, ActFunc.TANH)
    weights = _weights(net)
    first = net.predict([0.2, 0.4, 0.9]).copy()
    second = net.predict([0.2, 0.4, 0.9])
    assert np.array_equal(first, second)
    for (w0, _), (w1, _) in zip(weights, _weights(net)):
        assert np.array_equal(w0, w1)

def _train_counter(seed, epochs=10_000):
    net = NeuralNetwork(3, 20, 2, ActFunc.TANH, rng=np.random.default_rng(seed))
    mse_before = mean_squared_error(net, COUNTER_IN, COUNTER_OUT)
    net.add_training_data(COUNTER_IN, COUNTER_OUT)
    assert net.train(epochs, 0.05)
    return net, mse_before, mean_squared_error(net, COUNTER_IN, COUNTER_OUT)

@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_counter_training_lowers_mse(seed):
    _, mse_before, mse_after = _train_counter(seed, epochs=500)
    assert mse_after < mse_before

def test_counter_table_is_learned():
    # 3-20-2 tanh/ReLU with all-positive init only reaches the table on some seeds
    net, mse_before, mse_after = _train_counter(4)
    assert mse_after < mse_before
    for x, y in zip(COUNTER_IN, COUNTER_OUT):
        assert np.round(np.clip(net.predict(x), 0.0, 1.0)).tolist() == y
    assert np.round(net.predict([1, 1, 1])).tolist() == [1.0, 1.0]

def test_print_predictions_format(summing_network):
    buf = io.StringIO()
    summing_network.print_predictions([[1, 2], [0, 0]], 1, buf)
    line = "-" * 80
    expected = (
        "\n" + line
        + "\nInput:\t1.0 2.0 \nOutput:\t3.5 \n"
        + "\nInput:\t0.0 0.0 \nOutput:\t0.5 \n"
        + line + "\n\n"
    )
    assert buf.getvalue() == expected

def test_print_predictions_defaults_to_stdout(summing_network, capsys):
    summing_network.print_predictions([[1, 1]], num_decimals=3)
    out = capsys.readouterr().out
    assert "Input:\t1.000 1.000 \n" in out
    assert "Output:\t2.500 \n" in out

def test_state_round_trip_restores_predictions(network_factory):
    src = network_factory(3, 4, 2, ActFunc.TANH)
    src.add_hidden_layer(3)
    dst = NeuralNetwork(rng=np.random.default_rng(99))
    dst.set_state(src.get_state())
    assert dst.num_hidden_layers == 2
    assert np.array_equal(dst.predict([1, 0, 1]), src.predict([1, 0, 1]))

def test_set_state_rejects_broken_chain(network_factory):
    net = network_factory(3, 2, 1)
    before = net.hidden_layers[0]
    bad = {
        "hidden_layers": [{"act_func": "relu", "weights": [[0.1] * 3] * 2, "bias": [0.0, 0.0]}],
        "output_layer": {"act_func": "relu", "weights": [[0.1] * 5], "bias": [0.0]},
    }
    with pytest.raises(RuntimeError):
        net.set_state(bad)
    assert net.hidden_layers[0] is before
