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
'''
Nodes of the R-tree.

A node has a height, its distance to the leaves, and a list of children:
    1. leaf nodes have height 1 and their children are the stored objects.
    1. internal nodes have a greater height and their children are nodes of
       height one less.

Each node caches the envelope enclosing all of its children. Adding a single
child extends the cache; any other change to the children must be followed by
:meth:`Node.reset_envelope`, since a union cannot be undone.
'''
from rindex.envelope import bound_all
from rindex.core.spatial_data import SpatialData


class Node(SpatialData):
    """
    Node of an R-tree.

    Attributes
    ----------
    children: list
        Child nodes, or stored objects for a leaf. The node owns the list.
    height: int
        Distance to the leaves, 1 for a leaf.
    envelope: Envelope
        Union of the children's envelopes.
    """
    __slots__ = ('children', 'height', '_envelope')

    def __init__(self, children=None, height=1):
        self.children = [] if children is None else list(children)
        self.height = height
        self.reset_envelope()

    @property
    def envelope(self):
        return self._envelope

    @property
    def is_leaf(self):
        return self.height == 1

    def __len__(self):
        return len(self.children)

    def __repr__(self):
        return "<Node height={} children={} {!r}>".format(
            self.height, len(self.children), self._envelope)

    def add(self, child):
        '''Appends `child` and extends the envelope to enclose it.'''
        self.children.append(child)
        self._envelope.extend(child.envelope)

    def reset_envelope(self):
        '''Recomputes the envelope from all the children.'''
        self._envelope = bound_all(self.children)
