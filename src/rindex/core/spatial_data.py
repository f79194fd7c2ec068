# Copyright (C) 2018 DataStorm
#
# This file is part of RIndex.
#
# RIndex is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# RIndex is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# A copy of the GNU General Public License is available in the LICENSE
# file or at <http://www.gnu.org/licenses/>.
"""
Capabilities shared by the index, its nodes and the objects it stores.

Three abstract interfaces are defined:
    1. :class:`SpatialData`: anything bound by an envelope. Stored objects and
       tree nodes alike.
    1. :class:`SpatialIndex`: a read-only queryable index.
    1. :class:`SpatialDatabase`: a mutable index, extending
       :class:`SpatialIndex` with inserts, deletes and bulk loads.

Callers depending only on :class:`SpatialIndex` can be handed a read-only view
of a mutable index.

None of the implementations are thread-safe. Concurrent mutations, or a
mutation during the iteration of a search, must be serialized by the caller.
"""
import abc


class SpatialData(abc.ABC):
    """
    Abstract interface for objects bound by an envelope.

    The index only reads the envelope and never mutates it.
    """
    __slots__ = ()

    @property
    @abc.abstractmethod
    def envelope(self):
        """The :class:`rindex.envelope.Envelope` enclosing the object."""
        pass

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is SpatialData:
            if any("envelope" in klass.__dict__ for klass in subclass.__mro__):
                return True
        return NotImplemented


class SpatialIndex(abc.ABC):
    """Abstract interface for read-only spatial indexes."""
    __slots__ = ()

    @abc.abstractmethod
    def search(self, envelope=None):
        """
        Lazily yields the stored objects whose envelope intersects
        `envelope`, or every stored object if `envelope` is None.
        """
        pass


class SpatialDatabase(SpatialIndex):
    """Abstract interface for mutable spatial indexes."""
    __slots__ = ()

    @abc.abstractmethod
    def insert(self, item):
        """Inserts the spatial data `item`."""
        pass

    @abc.abstractmethod
    def delete(self, item):
        """
        Removes `item`. Returns False, without raising, if it was not found.
        """
        pass

    @abc.abstractmethod
    def clear(self):
        """Removes every object."""
        pass

    @abc.abstractmethod
    def bulk_load(self, items):
        """Inserts a batch of spatial data at once."""
        pass
