# tools/plot_training.py
import math
import csv
import sys
from collections import deque
from pathlib import Path

# Use a non-interactive backend that writes to files
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

# --- Paths (resolve relative to repo root = parent of this script dir) ---
SCRIPT_DIR = Path(__file__).resolve().parent
REPO_ROOT = SCRIPT_DIR.parent
LOG_PATH = Path(sys.argv[1]) if len(sys.argv) > 1 else (REPO_ROOT / "runs" / "counter" / "logs.csv")
OUT_DIR = LOG_PATH.parent / "plots"
OUT_DIR.mkdir(parents=True, exist_ok=True)

def to_float(v):
    try:
        return float(v)
    except (TypeError, ValueError):
        return math.nan

def rolling_mean(xs, window):
    out, q, s = [], deque(), 0.0
    for x in xs:
        x = float(x)
        q.append(x); s += x
        if len(q) > window:
            s -= q.popleft()
        out.append(s / len(q))
    return out

if not LOG_PATH.exists():
    raise FileNotFoundError(f"Could not find logs.csv at {LOG_PATH}. "
                            f"Run `python main.py counter` first or pass the CSV path.")

epochs = []
mse, mse_ema, mse_mean100, mse_min100 = [], [], [], []

with LOG_PATH.open(newline="") as f:
    r = csv.DictReader(f)
    fieldnames = r.fieldnames or []
    def get(row, k): return to_float(row[k]) if k in fieldnames and row.get(k) not in (None, "") else math.nan

    for row in r:
        epochs.append(int(float(row["step"])))
        mse.append(get(row, "train/mse"))
        mse_ema.append(get(row, "train/mse_ema"))
        mse_mean100.append(get(row, "train/mse_mean100"))
        mse_min100.append(get(row, "train/mse_min100"))

if not epochs:
    raise RuntimeError(f"{LOG_PATH} has a header but no rows. Run training first, "
                       f"or lower log_every so it logs sooner.")

# Backfill EMA if missing (older logs)
if all(math.isnan(x) for x in mse_ema):
    mse_ema = rolling_mean([0.0 if math.isnan(x) else x for x in mse], window=20)

def savefig_named(fig, name):
    path = OUT_DIR / name
    fig.savefig(path, dpi=200, bbox_inches="tight")
    print(f"saved: {path}")

fig = plt.figure(figsize=(10, 6))
plt.plot(epochs, mse, linewidth=1, alpha=0.5, label="raw")
plt.plot(epochs, mse_ema, linewidth=2, label="EMA")
plt.plot(epochs, mse_mean100, linewidth=2, label="mean@100")
plt.yscale("log")
plt.title("Training MSE"); plt.xlabel("epoch"); plt.ylabel("mse"); plt.legend()
savefig_named(fig, "train_mse.png"); plt.close(fig)

fig = plt.figure(figsize=(10, 5))
plt.plot(epochs, mse_min100, linewidth=2)
plt.yscale("log")
plt.title("Best MSE (rolling 100 logs)"); plt.xlabel("epoch"); plt.ylabel("mse")
savefig_named(fig, "train_mse_min.png"); plt.close(fig)

print(f"\nAll plots saved under: {OUT_DIR.resolve()}")
