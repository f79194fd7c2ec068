import logging

import pytest

from rindex import (Box, Envelope, IndexView, InvalidEnvelopeError, RTree,
                    SpatialData, SpatialDatabase, SpatialIndex)
from conftest import brute_search, check_tree, random_boxes


@pytest.fixture
def scenario():
    return {
        "R1": Box(0, 0, 1, 1, data="R1"),
        "R2": Box(5, 5, 6, 6, data="R2"),
        "R3": Box(0.5, 0.5, 1.5, 1.5, data="R3"),
    }


def data(items):
    return {item.data for item in items}


def test_empty_tree():
    tree = RTree()
    assert len(tree) == 0
    assert tree.is_empty
    assert tree.height == 1
    assert tree.root.is_leaf
    assert tree.envelope == Envelope.empty()
    assert list(tree.search()) == []
    assert list(tree.search(Envelope.infinite())) == []
    check_tree(tree)


def test_scenario(scenario):
    tree = RTree()
    for name in ("R1", "R2", "R3"):
        tree.insert(scenario[name])
    assert data(tree.search(Envelope(0, 0, 2, 2))) == {"R1", "R3"}
    assert tree.delete(scenario["R1"])
    assert data(tree.search()) == {"R2", "R3"}
    check_tree(tree)


@pytest.mark.parametrize("config", [
    {"max_entries": 3},
    {"max_entries": 4.0},
    {"max_entries": 8, "min_entries": 1},
    {"max_entries": 8, "min_entries": 5},
])
def test_invalid_config(config):
    with pytest.raises(ValueError):
        RTree(**config)


def test_default_config():
    tree = RTree()
    assert (tree.min_entries, tree.max_entries) == (4, 9)
    assert (RTree(max_entries=4).min_entries) == 2
    assert (RTree(max_entries=16).min_entries) == 7
    assert "fan-out=[4, 9]" in repr(tree)


def test_capabilities(tree):
    assert isinstance(tree, SpatialDatabase)
    assert isinstance(tree, SpatialIndex)
    assert isinstance(tree.root, SpatialData)
    assert isinstance(Box(0, 0, 1, 1), SpatialData)

    class Tile():
        envelope = Envelope(0, 0, 1, 1)

    assert issubclass(Tile, SpatialData)
    assert not issubclass(int, SpatialData)


def test_insert_search_all(tree, boxes):
    check_tree(tree)
    assert len(tree) == len(boxes)
    assert set(tree.search()) == set(boxes)
    assert set(tree) == set(boxes)
    assert tree.envelope.contains(Envelope.merge(b.envelope for b in boxes))


@pytest.mark.parametrize("query", [
    Envelope(0, 0, 100, 100),
    Envelope(250, 400, 600, 420),
    Envelope.from_point(500, 500),
    Envelope(-10, -10, -5, -5),
    Envelope.infinite(),
])
def test_search_matches_scan(tree, boxes, query):
    assert data(tree.search(query)) == brute_search(boxes, query)


def test_search_own_envelope(tree, boxes):
    for box in boxes[::25]:
        assert box in set(tree.search(box.envelope))
        assert box in tree


def test_search_is_lazy(tree):
    results = tree.search(Envelope.infinite())
    assert next(results) is not None


def test_tree_grows(boxes):
    tree = RTree(max_entries=4)
    heights = []
    for box in boxes:
        tree.insert(box)
        heights.append(tree.height)
    assert heights == sorted(heights)
    assert tree.height > 3
    check_tree(tree)


def test_single_split():
    tree = RTree(max_entries=4, min_entries=2)
    boxes = [Box(i, i, i + 1, i + 1, data=i) for i in range(5)]
    for box in boxes[:4]:
        tree.insert(box)
    assert tree.height == 1
    tree.insert(boxes[4])
    assert tree.height == 2
    halves = tree.root.children
    assert len(halves) == 2
    for half in halves:
        assert half.is_leaf
        assert 2 <= len(half) <= 4
    assert Envelope.merge(h.envelope for h in halves) == Envelope(0, 0, 5, 5)
    assert tree.envelope == Envelope(0, 0, 5, 5)
    check_tree(tree)


def test_split_separates_clusters():
    # Two clusters far apart along y: the split keeps each cluster together.
    tree = RTree(max_entries=4, min_entries=2)
    boxes = [Box(x, y, x + 1, y + 1) for x, y in
             [(0, 0), (3, 100), (1, 0), (2, 100), (0.5, 0.5)]]
    for box in boxes:
        tree.insert(box)
    groups = sorted(
        sorted(b.envelope.miny for b in leaf.children)
        for leaf in tree.root.children)
    assert groups == [[0, 0, 0.5], [100, 100]]


def test_split_is_deterministic(boxes):
    first, second = RTree(max_entries=5), RTree(max_entries=5)
    for box in boxes:
        first.insert(box)
        second.insert(box)
    assert [b.data for b in first] == [b.data for b in second]


def test_insert_invalid(tree, boxes):
    for box in (Box(0, 0, float("nan"), 1), Box(2, 0, 1, 1)):
        with pytest.raises(InvalidEnvelopeError):
            tree.insert(box)
    assert len(tree) == len(boxes)
    check_tree(tree)


def test_insert_degenerate():
    tree = RTree(max_entries=4)
    points = [Box.from_point(1, 1, data=i) for i in range(20)]
    for point in points:
        tree.insert(point)
    check_tree(tree)
    assert data(tree.search(Envelope.from_point(1, 1))) == set(range(20))
    assert tree.envelope == Envelope.from_point(1, 1)
    for point in points:
        assert tree.delete(point)
    assert tree.is_empty
    check_tree(tree)


def test_insert_infinite():
    tree = RTree(max_entries=4)
    everywhere = Box(*Envelope.infinite().bounds, data="all")
    tree.insert(everywhere)
    for box in random_boxes(30):
        tree.insert(box)
    assert "all" in data(tree.search(Envelope.from_point(-1e9, 1e9)))
    assert tree.delete(everywhere)
    assert len(tree) == 30


def test_delete_absent(tree, boxes):
    assert not tree.delete(Box(0, 0, 1, 1))
    # A copy with equal bounds is a different item.
    assert not tree.delete(Box(*boxes[0].envelope.bounds, data=0))
    assert not tree.delete(Box(-50, -50, -40, -40))
    assert len(tree) == len(boxes)
    assert not RTree().delete(boxes[0])


def test_delete_absent_logs(tree, caplog):
    with caplog.at_level(logging.DEBUG, logger="rindex.core.rtree"):
        tree.delete(Box(0, 0, 1, 1))
    assert "not found" in caplog.text


def test_delete_twice(tree, boxes):
    assert tree.delete(boxes[3])
    assert not tree.delete(boxes[3])
    assert boxes[3] not in tree


def test_insert_delete_restores(tree, boxes):
    before = set(tree.search())
    extra = Box(10, 10, 20, 20)
    tree.insert(extra)
    assert tree.delete(extra)
    assert set(tree.search()) == before


def test_delete_all(tree, boxes):
    for count, box in enumerate(boxes[::-1]):
        assert tree.delete(box)
        if count % 50 == 0:
            check_tree(tree)
            remaining = boxes[:len(boxes) - count - 1]
            assert set(tree) == set(remaining)
    assert len(tree) == 0
    assert tree.height == 1
    assert list(tree.search()) == []
    check_tree(tree)


def test_delete_shrinks(boxes):
    tree = RTree(max_entries=4)
    for box in boxes:
        tree.insert(box)
    tall = tree.height
    for box in boxes[:-3]:
        tree.delete(box)
    assert tree.height < tall
    assert tree.height == 1
    assert set(tree) == set(boxes[-3:])


def test_delete_condenses(boxes, caplog):
    tree = RTree(max_entries=4, min_entries=2)
    for box in boxes[:100]:
        tree.insert(box)
    with caplog.at_level(logging.DEBUG, logger="rindex.core.rtree"):
        for box in boxes[:60]:
            assert tree.delete(box)
            check_tree(tree)
    assert "Reinserting" in caplog.text
    assert set(tree) == set(boxes[60:100])
    for query in (Envelope(0, 0, 500, 500), Envelope(400, 0, 1000, 1000)):
        assert data(tree.search(query)) == brute_search(boxes[60:100], query)


def test_interleaved_updates(boxes):
    tree = RTree(max_entries=5)
    live = []
    for i, box in enumerate(boxes):
        tree.insert(box)
        live.append(box)
        if i % 3 == 2:
            assert tree.delete(live.pop(len(live) // 2))
    check_tree(tree)
    assert set(tree) == set(live)


def test_clear(tree):
    tree.clear()
    assert len(tree) == 0
    assert tree.height == 1
    assert list(tree.search(Envelope.infinite())) == []
    tree.insert(Box(0, 0, 1, 1))
    assert len(tree) == 1


def test_value_equality_items():
    class Cell():
        def __init__(self, x, y):
            self.x, self.y = x, y
            self.envelope = Envelope(x, y, x + 1, y + 1)

        def __eq__(self, other):
            return (self.x, self.y) == (other.x, other.y)

    tree = RTree()
    tree.insert(Cell(1, 2))
    assert Cell(1, 2) in tree
    assert tree.delete(Cell(1, 2))
    assert tree.is_empty


def test_view(tree, boxes):
    view = tree.view()
    assert isinstance(view, IndexView)
    assert isinstance(view, SpatialIndex)
    assert not isinstance(view, SpatialDatabase)
    assert not hasattr(view, "insert")
    assert len(view) == len(boxes)
    query = Envelope(100, 100, 300, 300)
    assert data(view.search(query)) == brute_search(boxes, query)
    tree.delete(boxes[0])
    assert len(view) == len(boxes) - 1
    assert boxes[0] not in view
    assert view.envelope == tree.envelope
    assert view.envelope is not tree.envelope
