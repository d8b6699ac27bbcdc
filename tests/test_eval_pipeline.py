import csv
import json

from annostudio.core.pipeline.log import MemoryLogger
from annostudio.core.schema import EvalConfig
from annostudio.eval.pipeline import EvalPipeline


def _write(p, obj):
    p.write_text(json.dumps(obj), encoding="utf-8")
    return str(p)


def _inputs(tmp_path):
    gts = {
        "img_1": [{"type": "bbox", "x": 10, "y": 10, "width": 20, "height": 20, "class": "cat"}],
        "img_2": [{"type": "bbox", "x": 50, "y": 50, "width": 20, "height": 20, "class": "cat"}],
    }
    preds = [
        {"image_id": "img_1", "predictions": [
            {"type": "bbox", "x": 11, "y": 11, "width": 20, "height": 20, "class": "cat", "score": 0.9},
            {"type": "bbox", "x": 200, "y": 200, "width": 5, "height": 5, "class": "dog", "score": 0.2},
        ]},
        {"image_id": "img_2", "predictions": [
            {"type": "bbox", "x": 50, "y": 50, "width": 20, "height": 20, "class": "dog", "score": 0.8},
        ]},
    ]
    return _write(tmp_path / "pred.json", preds), _write(tmp_path / "gt.json", gts)


def test_review_writes_reports(tmp_path):
    pred, gt = _inputs(tmp_path)
    cfg = EvalConfig(predictions_path=pred, ground_truth_path=gt, out_dir=str(tmp_path / "runs"), timestamp="t0")
    log = MemoryLogger()
    out = EvalPipeline().run(cfg, log=log)

    assert out == tmp_path / "runs" / "review_t0"
    confusion = json.loads((out / "confusion.json").read_text())
    assert confusion["classes"] == ["cat", "dog", "Background"]
    cells = {(c["actual"], c["predicted"]): c["count"] for c in confusion["cells"]}
    assert cells[("cat", "cat")] == 1
    assert cells[("cat", "dog")] == 1
    assert cells[("Background", "dog")] == 1

    with (out / "class_metrics.csv").open(newline="", encoding="utf-8") as f:
        rows = {r["class_name"]: r for r in csv.DictReader(f)}
    assert rows["cat"]["tp"] == "1"
    assert rows["cat"]["fn"] == "1"
    assert rows["dog"]["fp"] == "2"
    assert (out / "charts" / "confusion.png").is_file()

    aggregated = [p for e, p in log.events if e == "aggregated"][0]
    assert aggregated["conserved"] is True


def test_conf_threshold_drops_low_scores(tmp_path):
    pred, gt = _inputs(tmp_path)
    cfg = EvalConfig(
        predictions_path=pred,
        ground_truth_path=gt,
        out_dir=str(tmp_path / "runs"),
        conf_threshold=0.5,
        timestamp="t1",
    )
    cfg.charts.enabled = False
    out = EvalPipeline().run(cfg, log=MemoryLogger())
    confusion = json.loads((out / "confusion.json").read_text())
    assert confusion["classes"] == ["cat", "dog", "Background"]
    cells = {(c["actual"], c["predicted"]): c["count"] for c in confusion["cells"]}
    assert cells[("Background", "dog")] == 0
    assert cells[("cat", "dog")] == 1
    assert not (out / "charts").exists()
