# main.py
import argparse

from config import AppConfig
from runners.run_counter import main as counter


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("mode", choices=["counter", "view"])
    p.add_argument("--epochs", type=int, default=None)
    p.add_argument("--lr", type=float, default=None)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--hidden", type=int, default=None, help="nodes per hidden layer")
    p.add_argument("--extra-layers", type=int, default=None, help="hidden layers stacked after the first")
    p.add_argument("--decimals", type=int, default=None)
    return p.parse_args()


def build_config(args) -> AppConfig:
    overrides = {
        "epochs": args.epochs,
        "lr": args.lr,
        "seed": args.seed,
        "num_hidden_nodes": args.hidden,
        "extra_hidden_layers": args.extra_layers,
        "num_decimals": args.decimals,
    }
    return AppConfig().with_(**{k: v for k, v in overrides.items() if v is not None})


def main():
    args = parse_args()
    cfg = build_config(args)
    if args.mode == "counter":
        counter(cfg)
    elif args.mode == "view":
        # pygame is only pulled in for this mode
        from runners.run_view import main as view
        view(cfg)


if __name__ == "__main__":
    main()
