# config.py
from dataclasses import dataclass, replace
from typing import Optional, Literal

@dataclass(frozen=True, slots=True)
class AppConfig:
    # shared / global
    seed: Optional[int] = None

    # architecture (3-bit counter demo)
    num_inputs: int = 3
    num_hidden_nodes: int = 20
    num_outputs: int = 2
    extra_hidden_layers: int = 0         # stacked after the first, same width
    hidden_act: Literal["relu", "tanh"] = "tanh"
    output_act: Literal["relu", "tanh"] = "relu"

    # training
    epochs: int = 10_000
    lr: float = 0.05

    # reporting
    num_decimals: int = 1
    log_path: Optional[str] = "runs/counter/logs.csv"
    log_every: int = 100
    ckpt_dir: Optional[str] = "runs/counter"
    ckpt_tag: str = "counter"

    # view
    view_size: tuple[int, int] = (960, 640)
    view_path: str = "runs/counter/network.png"

    def with_(self, **kwargs) -> "AppConfig":
        """Convenience: clone with updated values"""
        return replace(self, **kwargs)
