from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional

from annostudio.core.config import load_eval_config, load_export_config
from annostudio.core.errors import AnnotationEngineError
from annostudio.core.io.records import load_image_records
from annostudio.core.schema import ExportConfig
from annostudio.dataset.readiness import summarize
from annostudio.eval.pipeline import EvalPipeline
from annostudio.export.pipeline import ExportPipeline


def _comma_list(v: Optional[str]) -> List[str]:
    if not v:
        return []
    return [x.strip() for x in v.split(",") if x.strip()]


def _export_cfg(args: argparse.Namespace) -> ExportConfig:
    cfg = load_export_config(args.config) if args.config else ExportConfig()
    if args.images:
        cfg.images_path = args.images
    if args.classes:
        cfg.classes = _comma_list(args.classes)
    return cfg


def _load_images(cfg: ExportConfig):
    if not cfg.images_path:
        raise SystemExit("error: no image manifest given (--images or images_path in config)")
    images, manifest_classes = load_image_records(cfg.images_path)
    classes = cfg.classes or manifest_classes or []
    return images, classes


def cmd_summary(args: argparse.Namespace) -> int:
    cfg = _export_cfg(args)
    images, classes = _load_images(cfg)
    summary = summarize(images, classes)
    print(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2))
    return 0 if summary.ready else 1


def cmd_export(args: argparse.Namespace) -> int:
    cfg = _export_cfg(args)
    if args.out_dir:
        cfg.storage.root = args.out_dir
    if args.concurrency is not None:
        cfg.concurrency = int(args.concurrency)
    if args.reencode is not None:
        cfg.reencode_images = bool(args.reencode)
    if args.strict:
        cfg.skip_unlabeled = False

    images, classes = _load_images(cfg)
    try:
        result = ExportPipeline(cfg).run(images, classes)
    except AnnotationEngineError as e:
        print(json.dumps(e.to_dict(), ensure_ascii=False, indent=2))
        return 2
    print(f"OK: {result.root} ({len(result.records)} images, {len(result.skipped)} skipped)")
    return 0


def cmd_eval(args: argparse.Namespace) -> int:
    cfg = load_eval_config(args.config)

    if args.predictions:
        cfg.predictions_path = args.predictions
    if args.ground_truth:
        cfg.ground_truth_path = args.ground_truth
    if args.classes:
        cfg.classes = _comma_list(args.classes)
    if args.out_dir:
        cfg.out_dir = args.out_dir
    if args.iou is not None:
        cfg.iou_threshold = float(args.iou)
    if args.conf is not None:
        cfg.conf_threshold = float(args.conf)
    if args.no_charts:
        cfg.charts.enabled = False

    out = EvalPipeline().run(cfg)
    print(f"OK: {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="annostudio")
    sub = p.add_subparsers(dest="cmd", required=True)

    def dataset_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--config", default=None, help="Export YAML config.")
        sp.add_argument("--images", help="Image manifest JSON (list or {images, classes}).")
        sp.add_argument("--classes", help="Comma-separated class catalog, in index order.")

    sps = sub.add_parser("summary", help="Dataset readiness summary for one step")
    dataset_args(sps)
    sps.set_defaults(func=cmd_summary)

    spx = sub.add_parser("export", help="Export a class-indexed training dataset")
    dataset_args(spx)
    spx.add_argument("--out-dir", help="Override storage.root.")
    spx.add_argument("--concurrency", type=int, help="Worker pool size.")
    spx.add_argument("--reencode", dest="reencode", action="store_true", help="Re-encode images as JPEG.")
    spx.add_argument("--no-reencode", dest="reencode", action="store_false", help="Copy images as-is.")
    spx.add_argument("--strict", action="store_true", help="Fail on images that produce no labels.")
    spx.set_defaults(reencode=None)
    spx.set_defaults(func=cmd_export)

    spe = sub.add_parser("eval", help="Review predictions against ground truth")
    spe.add_argument("--config", default="configs/eval.yaml", help="Review YAML config.")
    spe.add_argument("--predictions", help="Override predictions_path.")
    spe.add_argument("--ground-truth", dest="ground_truth", help="Override ground_truth_path.")
    spe.add_argument("--classes", help="Comma-separated class catalog used to canonicalize labels.")
    spe.add_argument("--out-dir", help="Override cfg.out_dir.")
    spe.add_argument("--iou", type=float, help="Override IoU threshold.")
    spe.add_argument("--conf", type=float, help="Override prediction confidence threshold.")
    spe.add_argument("--no-charts", action="store_true", help="Skip chart rendering.")
    spe.set_defaults(func=cmd_eval)

    return p


def main() -> int:
    args = build_parser().parse_args()
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
