# tests/conftest.py
import os
import sys

# Headless SDL so tests don't open a window
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

# Ensure project root is importable (so NN.* imports work when running from repo root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pygame as pg
import pytest

@pytest.fixture(scope="session", autouse=True)
def _pygame_session():
    pg.init()
    yield
    pg.quit()

@pytest.fixture
def rng():
    return np.random.default_rng(1234)

@pytest.fixture
def layer_factory(rng):
    from NN.dense_layer import DenseLayer
    def make(num_nodes=2, num_weights_per_node=2, act_func="relu", weights=None, bias=None):
        layer = DenseLayer(num_nodes, num_weights_per_node, act_func, rng=rng)
        if weights is not None:
            layer.weights[:] = np.asarray(weights, dtype=np.float64)
        if bias is not None:
            layer.bias[:] = np.asarray(bias, dtype=np.float64)
        return layer
    return make

@pytest.fixture
def network_factory(rng):
    from NN.neural_network import NeuralNetwork
    def make(*sizes, **kwargs):
        kwargs.setdefault("rng", rng)
        return NeuralNetwork(*sizes, **kwargs)
    return make

@pytest.fixture
def summing_network(network_factory):
    """2 -> 2 -> 1 ReLU network: hidden copies the input, output = x0 + x1 + 0.5."""
    net = network_factory(2, 2, 1)
    hidden = net.hidden_layers[0]
    hidden.weights[:] = [[1.0, 0.0], [0.0, 1.0]]
    hidden.bias[:] = 0.0
    net.output_layer.weights[:] = [[1.0, 1.0]]
    net.output_layer.bias[:] = 0.5
    return net
