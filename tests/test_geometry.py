import math

from annostudio.labels.geometry import (
    BoundingBox,
    Polygon,
    denormalize_box,
    format_coord,
    iou,
    normalize_box,
    polygon_to_normalized_points,
)


def test_iou_symmetric_and_bounded():
    a = BoundingBox(10, 10, 20, 20)
    b = BoundingBox(15, 5, 30, 10)
    assert iou(a, b) == iou(b, a)
    assert 0.0 <= iou(a, b) <= 1.0


def test_iou_identity_and_disjoint():
    a = BoundingBox(3, 4, 5, 6)
    assert iou(a, a) == 1.0
    assert iou(a, BoundingBox(100, 100, 5, 5)) == 0.0


def test_iou_degenerate_boxes_are_zero():
    assert iou(BoundingBox(0, 0, 0, 10), BoundingBox(0, 0, 10, 10)) == 0.0
    assert iou(BoundingBox(0, 0, 0, 0), BoundingBox(0, 0, 0, 0)) == 0.0


def test_iou_touching_edges_is_zero():
    assert iou(BoundingBox(0, 0, 10, 10), BoundingBox(10, 0, 10, 10)) == 0.0


def test_iou_scenario_value():
    gt = BoundingBox(10, 10, 20, 20)
    pred = BoundingBox(12, 11, 18, 19)
    assert math.isclose(iou(gt, pred), 342 / 400)


def test_negative_extent_is_flipped():
    b = BoundingBox(30, 30, -20, -10)
    assert (b.x, b.y, b.width, b.height) == (10, 20, 20, 10)


def test_from_xyxy_and_center():
    assert BoundingBox.from_xyxy(30, 40, 10, 20) == BoundingBox(10, 20, 20, 20)
    assert BoundingBox.from_center(20, 20, 10, 4) == BoundingBox(15, 18, 10, 4)


def test_normalize_denormalize_round_trip():
    W, H = 640, 480
    for box in [BoundingBox(0, 0, 640, 480), BoundingBox(12.5, 33.25, 100, 7), BoundingBox(600, 470, 40, 10)]:
        back = denormalize_box(normalize_box(box, W, H), W, H)
        assert abs(back.x - box.x) < 1e-4
        assert abs(back.y - box.y) < 1e-4
        assert abs(back.width - box.width) < 1e-4
        assert abs(back.height - box.height) < 1e-4


def test_normalize_clamps_outside_image():
    n = normalize_box(BoundingBox(-50, -50, 400, 400), 100, 100)
    assert all(0.0 <= v <= 1.0 for v in (n.x, n.y, n.width, n.height))
    assert n.width == 1.0


def test_polygon_normalization_requires_three_points():
    assert polygon_to_normalized_points([(0, 0), (10, 10)], 100, 100) is None
    pts = polygon_to_normalized_points([(0, 0), (50, 0), (150, 25)], 100, 50)
    assert pts == [(0.0, 0.0), (0.5, 0.0), (1.0, 0.5)]


def test_polygon_bounds():
    p = Polygon(((5, 5), (15, 2), (10, 20)))
    assert p.bounds() == BoundingBox(5, 2, 10, 18)


def test_format_coord():
    assert format_coord(0.22) == "0.220000"
    assert format_coord(float("nan")) == "0"
    assert format_coord(float("inf")) == "0"
    assert format_coord(1) == "1.000000"
