from annostudio.core.types import Split
from annostudio.dataset.readiness import summarize
from annostudio.dataset.splits import normalize_split
from annostudio.domain.records import ImageRecord


def img(i, anns=None, group=None, w=100, h=100):
    return ImageRecord(image_id=str(i), image_path=f"{i}.jpg", width=w, height=h, group=group, annotations=anns or [])


BOX = {"type": "bbox", "x": 1, "y": 1, "width": 5, "height": 5, "class": "cat"}
POLY = {"type": "polygon", "class": "cat", "points": [[0, 0], [5, 0], [5, 5]]}


def test_split_table():
    assert normalize_split("training") == Split.TRAIN
    assert normalize_split("Validation") == Split.VAL
    assert normalize_split("inference") == Split.VAL
    assert normalize_split("val") == Split.VAL
    assert normalize_split("testing") == Split.TEST
    assert normalize_split("test") == Split.TEST
    assert normalize_split("") == Split.TRAIN
    assert normalize_split(None) == Split.TRAIN
    assert normalize_split("holdout") == Split.TRAIN


def test_ten_unlabeled_images_not_ready():
    s = summarize([img(i) for i in range(10)], ["cat", "dog"])
    assert s.total == 10
    assert s.labeled == 0
    assert s.ready is False


def test_ready_with_labels_and_splits():
    images = [img(1, [BOX], "training"), img(2, [BOX], "validation"), img(3, [], "testing"), img(4, [BOX])]
    s = summarize(images, ["cat"])
    assert s.ready
    assert s.labeled == 3
    assert s.splits == {"train": 2, "val": 1, "test": 1}
    assert s.label_types == {"boxes": 3, "segments": 0}
    assert s.to_dict()["ready"] is True


def test_zero_classes_uses_raw_annotation_check():
    s = summarize([img(1, [BOX]), img(2)], [])
    assert s.labeled == 1
    assert s.classes_count == 0
    assert not s.ready
    assert any("no classes are configured" in w for w in s.warnings)


def test_mixed_label_types_warning():
    s = summarize([img(1, [BOX, POLY], "validation")], ["cat"])
    assert s.label_types == {"boxes": 1, "segments": 1}
    assert any(w.startswith("Mixed label types") for w in s.warnings)


def test_class_defects_reported():
    anns = [dict(BOX, **{"class": "horse"}), {"type": "bbox", "x": 0, "y": 0, "width": 1, "height": 1}]
    s = summarize([img(1, anns, "val")], ["cat", "dog"])
    assert s.labeled == 0
    assert s.class_stats == {"total": 2, "missing": 1, "mismatched": 1}
    assert len([w for w in s.warnings if "class" in w]) == 2


def test_unknown_dimensions_still_count_as_labeled():
    s = summarize([img(1, [BOX], "val", w=None, h=None)], ["cat"])
    assert s.labeled == 1


def test_summarize_is_pure():
    images = [img(1, [BOX], "val")]
    before = [dict(a) for a in images[0].annotations]
    summarize(images, ["cat"])
    assert images[0].annotations == before
