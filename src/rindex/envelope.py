"""
Axis-aligned bounding rectangles.

Every object stored in the index, and every node of the tree, is bound by an
:class:`Envelope`. Envelopes are small mutable values: only :meth:`extend`
changes an envelope in place, all the other combinators return new ones.

Two sentinels are provided. The empty bounds (mins at +inf, maxs at -inf) are
the identity of the union and never intersect nor contain anything. The
infinite bounds absorb any union and contain everything.
"""
import math

import toolz

DEGENERATE_TOLERANCE = 1e-9


class InvalidEnvelopeError(ValueError):
    """Raised when an envelope with NaN or inverted bounds enters the index."""


def bound_all(sdata):
    """Union of the envelopes of a collection of spatial data."""
    return Envelope.merge(obj.envelope for obj in sdata)


# Flat sides have no area, even when the other side is infinite.
def _area(width, height):
    if width <= 0. or height <= 0.:
        return 0.
    return width * height


class Envelope():
    """
    Axis-aligned minimum bounding rectangle.

    Args:
        minx, miny, maxx, maxy (float): the bounds of the rectangle.
    """
    __slots__ = ('minx', 'miny', 'maxx', 'maxy')

    def __init__(self, minx, miny, maxx, maxy):
        self.minx = float(minx)
        self.miny = float(miny)
        self.maxx = float(maxx)
        self.maxy = float(maxy)

    @classmethod
    def from_point(cls, x, y):
        return cls(x, y, x, y)

    @classmethod
    def empty(cls):
        """Identity element of the union."""
        return cls(math.inf, math.inf, -math.inf, -math.inf)

    @classmethod
    def infinite(cls):
        """Absorbing element of the union."""
        return cls(-math.inf, -math.inf, math.inf, math.inf)

    @classmethod
    def merge(cls, collection):
        """
        Returns the envelope of a collection of envelopes.

        An empty collection gives the empty bounds.
        """
        return toolz.reduce(lambda acc, env: acc.extend(env), collection,
                            cls.empty())

    def __repr__(self):
        return "Envelope(minx={}, miny={}, maxx={}, maxy={})".format(
            *self.bounds)

    def __eq__(self, other):
        if not isinstance(other, Envelope):
            return NotImplemented
        return self.bounds == other.bounds

    __hash__ = None

    def __iter__(self):
        return iter(self.bounds)

    @property
    def bounds(self):
        return (self.minx, self.miny, self.maxx, self.maxy)

    # ----- Measures

    @property
    def area(self):
        return _area(self.maxx - self.minx, self.maxy - self.miny)

    @property
    def margin(self):
        """Half perimeter."""
        return max(self.maxx - self.minx, 0.) + max(self.maxy - self.miny, 0.)

    # A degenerate axis reports its coordinate directly, so that points keep
    # their exact coordinates instead of a rounded midpoint.
    @property
    def center_x(self):
        if abs(self.maxx - self.minx) < DEGENERATE_TOLERANCE:
            return self.minx
        return 0.5 * (self.minx + self.maxx)

    @property
    def center_y(self):
        if abs(self.maxy - self.miny) < DEGENERATE_TOLERANCE:
            return self.miny
        return 0.5 * (self.miny + self.maxy)

    @property
    def center(self):
        return (self.center_x, self.center_y)

    @property
    def is_empty(self):
        """True for the empty bounds and any inverted rectangle."""
        return self.minx > self.maxx or self.miny > self.maxy

    @property
    def is_valid(self):
        """True when no coordinate is NaN and the rectangle is not inverted."""
        if any(math.isnan(c) for c in self.bounds):
            return False
        return not self.is_empty

    def validate(self):
        """Returns self, or raises InvalidEnvelopeError if it is not valid."""
        if not self.is_valid:
            raise InvalidEnvelopeError(
                "Invalid envelope {!r}: coordinates must not be NaN and mins "
                "must not exceed maxs.".format(self))
        return self

    # ----- Combinators

    def extend(self, other):
        """Grows self in place to enclose `other`. Returns self."""
        self.minx = min(self.minx, other.minx)
        self.miny = min(self.miny, other.miny)
        self.maxx = max(self.maxx, other.maxx)
        self.maxy = max(self.maxy, other.maxy)
        return self

    def clone(self):
        return Envelope(*self.bounds)

    def intersection(self, other):
        """
        Per-axis overlap of self and `other`.

        Disjoint inputs give an inverted rectangle, whose area is 0.
        """
        return Envelope(
            max(self.minx, other.minx),
            max(self.miny, other.miny),
            min(self.maxx, other.maxx),
            min(self.maxy, other.maxy),
        )

    def intersection_area(self, other):
        return self.intersection(other).area

    def enlargement(self, other):
        """The union of self and `other` as a new envelope."""
        return self.clone().extend(other)

    def enlarged_area(self, other):
        """Area of the union of self and `other`."""
        return _area(
            max(self.maxx, other.maxx) - min(self.minx, other.minx),
            max(self.maxy, other.maxy) - min(self.miny, other.miny),
        )

    # ----- Predicates (closed intervals)

    def contains(self, other):
        if other.is_empty:
            return False
        return (
            self.minx <= other.minx
            and self.miny <= other.miny
            and self.maxx >= other.maxx
            and self.maxy >= other.maxy
        )

    def intersects(self, other):
        if self.is_empty or other.is_empty:
            return False
        return (
            self.minx <= other.maxx
            and self.miny <= other.maxy
            and self.maxx >= other.minx
            and self.maxy >= other.miny
        )
