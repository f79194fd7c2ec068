"""
Module wrapping pandas DataFrames.

A :class:`FrameIndex` indexes the rows of a DataFrame holding one bounding box
per row, such as the `bounds` frame of a GeoPandas GeoSeries.
"""
import numpy
import pandas

from rindex.core.rtree import RTree
from rindex.envelope import Envelope
from rindex.items import Box

BOUNDS_COLUMNS = ("minx", "miny", "maxx", "maxy")


class FrameIndex():
    """
    Spatial index over the rows of a DataFrame.

    Parameters
    ----------
    frame: pandas DataFrame
        One row per rectangle.
    columns: 4-tuple of str (default ('minx', 'miny', 'maxx', 'maxy'))
        Names of the bounds columns.
    kwargs:
        Fan-out configuration passed to :class:`rindex.core.rtree.RTree`.

    Attributes
    ----------
    frame: pandas DataFrame
    tree: RTree
        Index of boxes whose payload is the row position in `frame`.
    """

    __slots__ = ('frame', 'tree')

    def __init__(self, frame, columns=BOUNDS_COLUMNS, **kwargs):
        missing = [col for col in columns if col not in frame.columns]
        if missing:
            raise KeyError("Missing bounds columns: {}".format(missing))
        self.frame = frame
        bounds = frame.loc[:, list(columns)].to_numpy(dtype=float)
        self.tree = RTree.from_items(
            (Box(*row, data=pos) for pos, row in enumerate(bounds)),
            **kwargs
        )

    def __len__(self):
        return len(self.tree)

    def _positions(self, envelope):
        if not isinstance(envelope, Envelope):
            envelope = Envelope(*envelope)
        return numpy.sort(numpy.fromiter(
            (box.data for box in self.tree.search(envelope)), dtype=int))

    def labels(self, envelope):
        """
        Index labels of the rows intersecting `envelope`, in frame order.

        `envelope` is an Envelope or a (minx, miny, maxx, maxy) tuple.
        """
        return self.frame.index[self._positions(envelope)]

    def query(self, envelope):
        """Rows intersecting `envelope`, in frame order."""
        return self.frame.iloc[self._positions(envelope)]


def index_frame(frame, columns=BOUNDS_COLUMNS, **kwargs):
    """Builds a :class:`FrameIndex`, from a GeoSeries bounds if needed."""
    if isinstance(frame, pandas.Series):
        frame = frame.bounds
    return FrameIndex(frame, columns=columns, **kwargs)
