# runners/run_view.py
from __future__ import annotations

from typing import Optional

from config import AppConfig
from NN import NeuralNetwork
from training.checkpoint import CheckpointManager
from runners.run_counter import TRAIN_IN, build_network, train_counter
from viz.network_view import NetworkView


def load_or_train(cfg: AppConfig) -> NeuralNetwork:
    """Reuse the final checkpoint of a previous counter run when there is one."""
    tag = f"{cfg.ckpt_tag}_final"
    ckpt = CheckpointManager(cfg.ckpt_dir) if cfg.ckpt_dir else None
    if ckpt is not None and ckpt.exists(tag):
        network = build_network(cfg)
        ckpt.load(tag, {"network": network})
        print(f"[view] loaded checkpoint: {ckpt.path_for(tag)}")
        return network
    return train_counter(cfg)


def main(cfg: Optional[AppConfig] = None, input=None) -> str:
    cfg = cfg or AppConfig()
    network = load_or_train(cfg)

    view = NetworkView(network, cfg.view_size)
    sample = input if input is not None else TRAIN_IN[-1]
    output = view.show_prediction(sample)
    path = view.save(cfg.view_path)

    print(f"[view] input={list(sample)}  output={[round(float(v), cfg.num_decimals) for v in output]}")
    print(f"[view] saved: {path}")
    return path


if __name__ == "__main__":
    main()
