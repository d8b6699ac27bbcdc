from annostudio.core.types import EmptyReason
from annostudio.labels.encoder import LabelStats, encode_image, line_kind
from annostudio.core.types import LabelKind


def test_scenario_box_line():
    anns = [{"type": "bbox", "x": 10, "y": 10, "width": 20, "height": 20, "class": "cat"}]
    enc = encode_image(anns, 100, 50, ["cat", "dog"])
    assert enc.lines == ["0 0.200000 0.400000 0.200000 0.400000"]
    assert enc.has_labels
    assert enc.stats == LabelStats(total=1, missing=0, mismatched=0)


def test_polygon_line_has_even_coordinate_count():
    anns = [{"type": "polygon", "label": "dog", "points": [{"x": 0, "y": 0}, {"x": 50, "y": 0}, {"x": 50, "y": 25}]}]
    enc = encode_image(anns, 100, 50, ["cat", "dog"])
    assert enc.lines == ["1 0.000000 0.000000 0.500000 0.000000 0.500000 0.500000"]
    tokens = enc.lines[0].split()
    assert (len(tokens) - 1) % 2 == 0
    assert line_kind(enc.lines[0]) == LabelKind.SEGMENT


def test_excluded_statuses_are_not_counted():
    anns = [
        {"type": "bbox", "x": 0, "y": 0, "width": 5, "height": 5, "class": "cat", "status": "deleted"},
        {"type": "bbox", "x": 0, "y": 0, "width": 5, "height": 5, "class": "cat", "status": "Archived"},
        {"type": "bbox", "x": 0, "y": 0, "width": 5, "height": 5, "class": "cat", "status": "disabled"},
    ]
    enc = encode_image(anns, 10, 10, ["cat"])
    assert enc.stats.total == 0
    assert enc.empty_reason() == EmptyReason.NO_ANNOTATIONS


def test_class_defects_are_counted_and_skipped():
    anns = [
        {"type": "bbox", "x": 0, "y": 0, "width": 5, "height": 5, "class": "horse"},
        {"type": "bbox", "x": 0, "y": 0, "width": 5, "height": 5},
        {"type": "bbox", "x": 0, "y": 0, "width": 5, "height": 5, "class": "cat"},
    ]
    enc = encode_image(anns, 10, 10, ["cat", "dog"])
    assert len(enc.lines) == 1
    assert enc.stats == LabelStats(total=3, missing=1, mismatched=1)


def test_geometric_defects_are_silent():
    anns = [
        {"type": "bbox", "x": "nan", "y": 0, "width": 5, "height": 5, "class": "cat"},
        {"type": "bbox", "x": 0, "y": 0, "width": 5, "class": "cat"},
        {"type": "polygon", "class": "cat", "points": [{"x": 0, "y": 0}, {"x": 1, "y": 1}]},
    ]
    enc = encode_image(anns, 10, 10, ["cat"])
    assert enc.lines == []
    assert enc.stats == LabelStats(total=3, missing=0, mismatched=0)
    assert enc.empty_reason() == EmptyReason.NO_ANNOTATIONS


def test_empty_reason_prefers_mismatch_then_missing():
    mismatch = encode_image([{"type": "bbox", "x": 0, "y": 0, "width": 1, "height": 1, "class": "x"}], 10, 10, ["a", "b"])
    missing = encode_image([{"type": "bbox", "x": 0, "y": 0, "width": 1, "height": 1}], 10, 10, ["a", "b"])
    assert mismatch.empty_reason() == EmptyReason.CLASS_MISMATCH
    assert missing.empty_reason() == EmptyReason.MISSING_CLASS
    assert mismatch.empty_message() != missing.empty_message()


def test_alternative_box_encodings():
    anns = [
        {"type": "rectangle", "x1": 10, "y1": 10, "x2": 30, "y2": 30, "class_name": "cat"},
        {"type": "bbox", "cx": 20, "cy": 20, "w": 20, "h": 20, "class_id": 0},
    ]
    enc = encode_image(anns, 100, 50, ["cat"])
    assert enc.lines == ["0 0.200000 0.400000 0.200000 0.400000"] * 2


def test_encoding_is_deterministic():
    anns = [
        {"type": "bbox", "x": 1.2345678, "y": 9.87654, "width": 3.3333, "height": 4.4444, "class": "dog"},
        {"type": "brush", "class": "cat", "points": [[1, 2], [3.5, 4.25], [7, 1]]},
    ]
    a = encode_image(anns, 37, 41, ["cat", "dog"])
    b = encode_image(anns, 37, 41, ["cat", "dog"])
    assert a.text.encode() == b.text.encode()


def test_input_records_are_not_mutated():
    rec = {"type": "bbox", "x": 30, "y": 30, "width": -20, "height": -20, "class": "cat"}
    before = dict(rec)
    encode_image([rec], 100, 100, ["cat"])
    assert rec == before


def test_label_stats_fold():
    assert LabelStats(1, 2, 3) + LabelStats(4, 5, 6) == LabelStats(5, 7, 9)
