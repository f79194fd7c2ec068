import numpy
import pytest

from rindex import Box, Envelope, RTree


def check_tree(tree, min_fill=True):
    """Asserts the structural invariants of `tree`."""
    root = tree.root
    count = 0
    stack = [(root, True)]
    while stack:
        node, is_root = stack.pop()
        assert len(node) <= tree.max_entries
        if min_fill and not is_root:
            assert len(node) >= tree.min_entries
        if not node.is_leaf:
            assert not is_root or len(node) >= 2
        assert node.envelope == Envelope.merge(
            c.envelope for c in node.children)
        if node.is_leaf:
            assert not any(hasattr(c, "height") for c in node.children)
            count += len(node)
        else:
            for child in node.children:
                assert child.height == node.height - 1
                stack.append((child, False))
    assert count == len(tree)


def random_boxes(n, seed=0, size=10.):
    rng = numpy.random.RandomState(seed)
    mins = rng.uniform(0, 1000, size=(n, 2))
    sides = rng.uniform(0, size, size=(n, 2))
    return [Box(x, y, x + w, y + h, data=i)
            for i, ((x, y), (w, h)) in enumerate(zip(mins, sides))]


def brute_search(boxes, envelope):
    return {b.data for b in boxes if b.envelope.intersects(envelope)}


@pytest.fixture
def boxes():
    return random_boxes(500)


@pytest.fixture
def tree(boxes):
    res = RTree(max_entries=6)
    for box in boxes:
        res.insert(box)
    return res
