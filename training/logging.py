from __future__ import annotations
import csv, os
from typing import Dict, Any, Protocol, Sequence, Callable

from .metrics import EMA, WindowedStat, mean_squared_error

ALL_KEYS = [
    "step",
    "train/epoch", "train/mse", "train/mse_ema", "train/mse_mean100",
    "train/mse_min100", "train/learning_rate",
]

class Logger(Protocol):
    def log(self, step: int, scalars: Dict[str, Any]) -> None: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


class CSVLogger:
    """Append-only CSV logger with header auto-discovery or predefined schema."""
    def __init__(self, path: str, fieldnames: list[str] | None = None):
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self.path = path
        self._fieldnames = fieldnames
        self._file = open(path, "a", newline="")
        self._writer = None

    def log(self, step: int, scalars: Dict[str, Any]) -> None:
        scalars = {"step": step, **scalars}
        if self._writer is None:
            if self._fieldnames is None:
                self._fieldnames = list(scalars.keys())
            self._writer = csv.DictWriter(
                self._file,
                fieldnames=self._fieldnames,
                extrasaction="ignore",   # unseen keys are dropped, not fatal
            )
            if self._file.tell() == 0:
                self._writer.writeheader()
        self._writer.writerow(scalars)

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "CSVLogger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def make_epoch_logger(
    logger: Logger,
    inputs: Sequence[Sequence[float]],
    targets: Sequence[Sequence[float]],
    log_every: int = 100,
    learning_rate: float | None = None,
    ema_alpha: float = 0.1,
    window: int = 100,
    on_log: Callable[[int, Dict[str, Any]], None] | None = None,
) -> Callable[[int, Any], None]:
    """
    Returns an on_epoch_end(epoch, network) hook for NeuralNetwork.train().

    Every `log_every` epochs (and on epoch 0) it evaluates the mean squared
    error over `inputs`/`targets`, folds it into EMA/window stats and writes
    one row. `on_log` also receives the row, e.g. for console progress.
    """
    ema = EMA(ema_alpha)
    win = WindowedStat(window)
    every = max(1, int(log_every))

    def _on_epoch_end(epoch: int, network) -> None:
        if epoch % every != 0:
            return
        mse = mean_squared_error(network, inputs, targets)
        mse_ema = ema.update(mse)
        win.add(mse)
        ws = win.summary()
        scalars = {
            "train/epoch": epoch,
            "train/mse": mse,
            "train/mse_ema": mse_ema,
            "train/mse_mean100": ws["mean"],
            "train/mse_min100": ws["min"],
            "train/learning_rate": learning_rate,
        }
        logger.log(epoch, scalars)
        logger.flush()
        if on_log is not None:
            on_log(epoch, scalars)

    return _on_epoch_end
