"""
Ready-made spatial data.

The index stores any object with an `envelope` attribute. :class:`Box` is the
simplest such object: a fixed rectangle with an arbitrary payload.
"""
from rindex.core.spatial_data import SpatialData
from rindex.envelope import Envelope


class Box(SpatialData):
    """
    Rectangle carrying a payload.

    Boxes compare by identity, so that two boxes with the same bounds and data
    remain distinct entries of an index.

    Args:
        minx, miny, maxx, maxy (float): bounds of the box.
        data (object, optional): payload.
    """
    __slots__ = ('_envelope', 'data')

    def __init__(self, minx, miny, maxx, maxy, data=None):
        self._envelope = Envelope(minx, miny, maxx, maxy)
        self.data = data

    @classmethod
    def from_point(cls, x, y, data=None):
        return cls(x, y, x, y, data=data)

    @property
    def envelope(self):
        return self._envelope

    def __repr__(self):
        return "Box({}, {}, {}, {}, data={!r})".format(
            *self._envelope.bounds, self.data)
