from __future__ import annotations

import argparse

from annostudio.core.config import load_eval_config
from annostudio.eval.pipeline import EvalPipeline


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="python -m annostudio.eval")
    p.add_argument(
        "--config",
        default="configs/eval.yaml",
        help="Path to review YAML config (default: configs/eval.yaml)",
    )
    return p.parse_args()


def main() -> None:
    args = _parse_args()
    cfg = load_eval_config(args.config)
    out = EvalPipeline().run(cfg)
    print(str(out))


if __name__ == "__main__":
    main()
