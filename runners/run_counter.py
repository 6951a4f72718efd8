# runners/run_counter.py
from __future__ import annotations

from typing import Optional, TextIO

from config import AppConfig
from NN import ActFunc, NeuralNetwork
from NN.random_source import resolve_rng, seed_default_rng
from training.checkpoint import CheckpointManager
from training.logging import ALL_KEYS, CSVLogger, make_epoch_logger
from training.metrics import mean_squared_error

# inputs[2:0] -> number of high inputs as outputs[1:0]
TRAIN_IN = [[0, 0, 0], [0, 0, 1], [0, 1, 0], [0, 1, 1],
            [1, 0, 0], [1, 0, 1], [1, 1, 0], [1, 1, 1]]
TRAIN_OUT = [[0, 0], [0, 1], [0, 1], [1, 0],
             [0, 1], [1, 0], [1, 0], [1, 1]]


def build_network(cfg: AppConfig) -> NeuralNetwork:
    rng = seed_default_rng(cfg.seed) if cfg.seed is not None else resolve_rng()
    network = NeuralNetwork(
        cfg.num_inputs,
        cfg.num_hidden_nodes,
        cfg.num_outputs,
        hidden_act=ActFunc(cfg.hidden_act),
        output_act=ActFunc(cfg.output_act),
        rng=rng,
    )
    if cfg.extra_hidden_layers > 0:
        network.add_hidden_layers(cfg.extra_hidden_layers, cfg.num_hidden_nodes, ActFunc(cfg.hidden_act))
    return network


def train_counter(cfg: AppConfig, verbose: bool = True) -> NeuralNetwork:
    """
    Train the 3-bit counter network described by cfg and return it.
    Per-epoch MSE goes to cfg.log_path (if set), final weights to cfg.ckpt_dir (if set).
    """
    network = build_network(cfg)
    if verbose:
        print(f"[counter] {network}")
        print(f"[counter] epochs={cfg.epochs}  lr={cfg.lr}  seed={cfg.seed}")
        print(f"[counter] mse before training: {mean_squared_error(network, TRAIN_IN, TRAIN_OUT):.4f}")

    def _progress(epoch: int, scalars: dict) -> None:
        if verbose:
            print(f"[counter] epoch {epoch:05d}  mse={scalars['train/mse']:.5f}  ema={scalars['train/mse_ema']:.5f}")

    logger = CSVLogger(cfg.log_path, fieldnames=ALL_KEYS) if cfg.log_path else None
    hook = None
    if logger is not None:
        hook = make_epoch_logger(logger, TRAIN_IN, TRAIN_OUT, log_every=cfg.log_every,
                                 learning_rate=cfg.lr, on_log=_progress)
    try:
        network.add_training_data(TRAIN_IN, TRAIN_OUT)
        if not network.train(cfg.epochs, cfg.lr, on_epoch_end=hook):
            raise ValueError(f"training refused: lr={cfg.lr}, sets={network.num_training_sets}")
    finally:
        if logger is not None:
            logger.close()

    if verbose:
        print(f"[counter] mse after training: {mean_squared_error(network, TRAIN_IN, TRAIN_OUT):.4f}")
    if cfg.ckpt_dir:
        path = CheckpointManager(cfg.ckpt_dir).save(f"{cfg.ckpt_tag}_final", {"network": network})
        if verbose:
            print(f"[counter] saved: {path}")
    return network


def main(cfg: Optional[AppConfig] = None, stream: Optional[TextIO] = None) -> NeuralNetwork:
    cfg = cfg or AppConfig()
    network = train_counter(cfg)
    network.print_predictions(TRAIN_IN, cfg.num_decimals, stream)
    return network


if __name__ == "__main__":
    main()
