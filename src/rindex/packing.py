"""
STR-Tree packing algorithm

Sort-Tile-Recurse builds a whole tree at once from a batch of objects. The
objects are sorted along x and cut into vertical slabs, each slab is sorted
along y and cut into tiles, and each tile recursively becomes a subtree.
Subtrees are packed as full as the fan-out allows, which gives trees both
shallower and with less overlap than sequential inserts.

The construction is top-down: the height of the tree is fixed first, so that
every leaf lies at the same depth.
"""
import math

import numpy
import toolz

from rindex.core.node import Node


def tree_height(count, page_size):
    """Smallest height such that `page_size` ** height >= `count`."""
    height = 1
    while page_size ** height < count:
        height += 1
    return height


def _tile_sizes(count, nb_tiles):
    """Sizes of `nb_tiles` consecutive tiles as even as possible."""
    q, r = divmod(count, nb_tiles)
    return [q + 1] * r + [q] * (nb_tiles - r)


def _split(arr, sizes):
    return numpy.split(arr, numpy.cumsum(sizes)[:-1])


def sort_tile_recurse(items, page_size=9):
    """
    Packs spatial data into a tree.

    Parameters:
        items (sequence of SpatialData): objects to pack.
        page_size (int): maximum number of children per node.

    Returns:
        Node: the root of the packed tree, an empty leaf if `items` is empty.
    """
    items = list(items)
    if not items:
        return Node([], height=1)
    bounds = numpy.array([item.envelope.bounds for item in items],
                         dtype=float)
    centers = 0.5 * (bounds[:, :2] + bounds[:, 2:])
    # Infinite extents have a NaN midpoint; sort them by their min instead.
    centers = numpy.where(numpy.isnan(centers), bounds[:, :2], centers)

    def sort_along(idx, axis):
        return idx[numpy.argsort(centers[idx, axis], kind="stable")]

    def build(idx, height):
        if height == 1:
            return Node([items[i] for i in idx], height=1)
        capacity = page_size ** (height - 1)
        nb_children = math.ceil(len(idx) / capacity)
        nb_slabs = math.ceil(math.sqrt(nb_children))
        tiles = _tile_sizes(len(idx), nb_children)
        slab_tiles = [tiles[s.start:s.stop] for s in _slab_slices(
            nb_children, nb_slabs)]
        slabs = _split(sort_along(idx, 0), [sum(t) for t in slab_tiles])
        node = Node([], height=height)
        for slab, sizes in zip(slabs, slab_tiles):
            for tile in _split(sort_along(slab, 1), sizes):
                node.add(build(tile, height - 1))
        return node

    return build(numpy.arange(len(items)), tree_height(len(items), page_size))


def _slab_slices(nb_tiles, nb_slabs):
    """Consecutive runs of tiles assigned to each slab."""
    stops = list(toolz.accumulate(
        lambda acc, size: acc + size, _tile_sizes(nb_tiles, nb_slabs)))
    return [slice(start, stop) for start, stop
            in zip([0] + stops[:-1], stops)]
