import random

import numpy as np
import pytest

from annostudio.core.errors import CatalogError
from annostudio.core.types import BACKGROUND
from annostudio.review.confusion import ConfusionAccumulator, aggregate, sort_classes
from annostudio.review.matching import evaluate_image


def box(x, y, w, h, cls, **kw):
    return {"type": "bbox", "x": x, "y": y, "width": w, "height": h, "class": cls, **kw}


def _dataset():
    evs = []
    for i in range(12):
        preds = [box(0, 0, 10, 10, "cat" if i % 3 else "dog", confidence=0.5 + i / 100)]
        gts = [box(0, 0, 10, 10, "cat")]
        if i % 4 == 0:
            preds.append(box(100, 100, 10, 10, "bird", confidence=0.3))
        if i % 5 == 0:
            gts.append(box(300, 300, 10, 10, "dog"))
        evs.append(evaluate_image(preds, gts, image_id=f"img_{i:02d}"))
    return evs


def test_scenario_single_true_positive_cell():
    ev = evaluate_image([box(12, 11, 18, 19, "cat", confidence=0.9)], [box(10, 10, 20, 20, "cat")], image_id="a")
    m = aggregate([ev])
    assert m.classes == ["cat"]
    assert m.count("cat", "cat") == 1
    assert m.cell("cat", "cat").examples == []


def test_mislabeled_match_is_one_cross_cell():
    ev = evaluate_image([box(12, 11, 18, 19, "dog", confidence=0.8)], [box(10, 10, 20, 20, "cat")], image_id="a")
    m = aggregate([ev])
    assert m.classes == ["cat", "dog", BACKGROUND]
    assert m.count("cat", "dog") == 1
    assert m.total == 1
    assert m.count("cat", BACKGROUND) == 0
    assert m.count(BACKGROUND, "dog") == 0
    assert m.is_conserved()


def test_background_axis_sorted_last():
    ev = evaluate_image([box(0, 0, 5, 5, "zebra")], [box(50, 50, 5, 5, "ant")], image_id="a")
    m = aggregate([ev])
    assert m.classes == ["ant", "zebra", BACKGROUND]
    assert m.count(BACKGROUND, "zebra") == 1
    assert m.count("ant", BACKGROUND) == 1


def test_dense_cells():
    m = aggregate(_dataset())
    n = len(m.classes)
    assert len(m.cells) == n * n
    assert m.to_array().shape == (n, n)
    assert int(m.to_array().sum()) == m.total


def test_conservation_over_dataset():
    evs = _dataset()
    m = aggregate(evs)
    preds = sum(len(e.predictions) for e in evs)
    unmatched = sum(len(e.unmatched_ground_truths) for e in evs)
    assert m.total == preds + unmatched
    assert m.is_conserved()


def test_examples_capped_and_off_diagonal_only():
    m = aggregate(_dataset())
    cell = m.cell("cat", "dog")
    assert cell.count == 4
    assert [e.image_id for e in cell.examples] == ["img_00", "img_03", "img_06"]
    assert cell.examples[0].confidence == 0.5
    assert m.cell("cat", "cat").examples == []
    assert all(e.confidence is None for e in m.cell("dog", BACKGROUND).examples)


def test_order_independent():
    evs = _dataset()
    shuffled = list(evs)
    random.Random(7).shuffle(shuffled)
    assert aggregate(evs).to_dict() == aggregate(shuffled).to_dict()


def test_merge_matches_sequential_fold():
    evs = _dataset()
    left, right = ConfusionAccumulator(), ConfusionAccumulator()
    for e in evs[5:]:
        left.add_image(e)
    for e in evs[:5]:
        right.add_image(e)
    merged = left.merge(right).build()
    assert merged.to_dict() == aggregate(evs).to_dict()
    assert np.array_equal(merged.to_array(), aggregate(evs).to_array())


def test_sort_classes():
    assert sort_classes([BACKGROUND, "b", "A", "a"]) == ["A", "a", "b", BACKGROUND]


def test_background_axis_survives_merge_without_background_cells():
    mislabeled = evaluate_image([box(0, 0, 10, 10, "dog")], [box(0, 0, 10, 10, "cat")], image_id="b")
    clean = evaluate_image([box(0, 0, 10, 10, "cat")], [box(0, 0, 10, 10, "cat")], image_id="a")
    merged = ConfusionAccumulator().add_image(clean).merge(ConfusionAccumulator().add_image(mislabeled)).build()
    assert merged.classes == ["cat", "dog", BACKGROUND]
    assert merged.to_dict() == aggregate([clean, mislabeled]).to_dict()


def test_all_true_positives_have_no_background_axis():
    ev = evaluate_image([box(0, 0, 10, 10, "cat")], [box(0, 0, 10, 10, "cat")], image_id="a")
    assert BACKGROUND not in aggregate([ev]).classes


def test_class_named_background_is_rejected():
    ev = evaluate_image([box(0, 0, 10, 10, BACKGROUND)], [box(0, 0, 10, 10, "cat")], image_id="a")
    with pytest.raises(CatalogError) as ei:
        aggregate([ev])
    assert ei.value.context["image_id"] == "a"
