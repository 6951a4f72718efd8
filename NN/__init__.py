# NN/__init__.py
from __future__ import annotations

from .activations import ActFunc
from .dense_layer import DenseLayer
from .neural_network import NeuralNetwork
from .random_source import default_rng, seed_default_rng

__all__ = ["ActFunc", "DenseLayer", "NeuralNetwork", "default_rng", "seed_default_rng"]
