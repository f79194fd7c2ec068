"""
In-memory R-tree spatial index over axis-aligned rectangles.

Objects bound by an envelope are inserted, deleted, bulk loaded and queried
for overlap with a rectangle, without scanning the whole collection.

    >>> from rindex import RTree, Box, Envelope
    >>> tree = RTree(max_entries=9)
    >>> tree.insert(Box(0, 0, 1, 1, data="a"))
    >>> [box.data for box in tree.search(Envelope(0, 0, 2, 2))]
    ['a']

Large batches should be bulk loaded: sort-tile-recurse packing builds a tree
much faster than repeated inserts, and with less overlap between nodes.
"""
from .envelope import Envelope, InvalidEnvelopeError, bound_all  # noqa: F401
from .core.spatial_data import (  # noqa: F401
    SpatialData, SpatialIndex, SpatialDatabase)
from .core.node import Node  # noqa: F401
from .core.rtree import RTree, IndexView  # noqa: F401
from .items import Box  # noqa: F401
from .packing import sort_tile_recurse  # noqa: F401

__version__ = "0.3.0"
