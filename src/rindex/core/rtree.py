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
R-tree spatial index.

The index is a balanced tree of :class:`rindex.core.node.Node`. All leaves lie
at the same depth, and every node but the root holds between `min_entries` and
`max_entries` children.

    1. Inserts descend along the child needing the least area enlargement.
       An overflowing node is split in two, R*-style: the split axis minimises
       the summed margins of the candidate distributions, and the split index
       minimises the overlap of the two halves. Splits may cascade up to the
       root, which is how the tree grows.
    1. Deletes find the leaf by a descent pruned on containment. Underfull
       nodes on the path are detached and their entries reinserted. A root
       left with a single child is replaced by it, which is how the tree
       shrinks.
    1. Bulk loads pack a batch with :func:`rindex.packing.sort_tile_recurse`.

The index is not thread-safe and has no internal locking. Searches are lazy:
mutating the tree while iterating over a search result is undefined.
'''
import logging
import math
import operator

import toolz

from rindex import packing
from rindex.core.node import Node
from rindex.core.spatial_data import SpatialDatabase, SpatialIndex
from rindex.envelope import Envelope

logger = logging.getLogger(__name__)


def _enlargement_key(envelope):
    """Least area increase, then least enlarged area, then least area."""
    def key(child):
        area = child.envelope.area
        enlarged = child.envelope.enlarged_area(envelope)
        # Infinite areas do not grow.
        increase = enlarged - area if enlarged != area else 0.
        return (increase, enlarged, area)
    return key


_by_minx = operator.attrgetter("envelope.minx")
_by_miny = operator.attrgetter("envelope.miny")


def _union(envelope, child):
    return envelope.enlargement(child.envelope)


class RTree(SpatialDatabase):
    """
    In-memory R-tree.

    Args:
        max_entries (int, optional): maximum number of children per node.
            Defaults to 9.
        min_entries (int, optional): minimum number of children of a non-root
            node. Defaults to 40% of `max_entries`, and at least 2.

    Raises:
        ValueError: for fan-outs that do not allow a split in two valid nodes.
    """
    def __init__(self, max_entries=9, min_entries=None):
        if not isinstance(max_entries, int) or max_entries < 4:
            raise ValueError(
                "max_entries must be an integer of at least 4, got {!r}"
                .format(max_entries))
        if min_entries is None:
            min_entries = max(2, math.ceil(0.4 * max_entries))
        if (not isinstance(min_entries, int)
                or not 2 <= min_entries <= max_entries // 2):
            raise ValueError(
                "min_entries must be an integer between 2 and {}, got {!r}"
                .format(max_entries // 2, min_entries))
        self.max_entries = max_entries
        self.min_entries = min_entries
        self.clear()

    @classmethod
    def from_items(cls, items, **kwargs):
        """Creates a tree and bulk loads `items` into it."""
        tree = cls(**kwargs)
        tree.bulk_load(items)
        return tree

    def __repr__(self):
        return "<{} items={} height={} fan-out=[{}, {}]>".format(
            self.__class__.__name__, self._count, self.height,
            self.min_entries, self.max_entries)

    # ----- State

    @property
    def root(self):
        return self._root

    @property
    def height(self):
        return self._root.height

    @property
    def envelope(self):
        """Copy of the envelope of the root."""
        return self._root.envelope.clone()

    @property
    def is_empty(self):
        return self._count == 0

    def __len__(self):
        return self._count

    def __iter__(self):
        return self.search()

    def __contains__(self, item):
        return self._find_leaf(item) is not None

    def view(self):
        """Read-only view over this tree."""
        return IndexView(self)

    def clear(self):
        self._root = Node([], height=1)
        self._count = 0

    # ----- Search

    def search(self, envelope=None):
        """
        Lazily yields the objects whose envelope intersects `envelope`.

        Without `envelope`, yields every object. Nodes are visited depth
        first; the order of the results is otherwise unspecified.
        """
        if envelope is None:
            return self._all(self._root)
        return self._search(envelope)

    def _search(self, envelope):
        node = self._root
        if not envelope.intersects(node.envelope):
            return
        stack = [node]
        while stack:
            node = stack.pop()
            for child in node.children:
                if not envelope.intersects(child.envelope):
                    continue
                if node.is_leaf:
                    yield child
                elif envelope.contains(child.envelope):
                    yield from self._all(child)
                else:
                    stack.append(child)

    @staticmethod
    def _all(node):
        stack = [node]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield from node.children
            else:
                stack.extend(node.children)

    # ----- Insert

    def insert(self, item):
        """
        Inserts `item`.

        Raises:
            InvalidEnvelopeError: if the envelope of `item` has NaN or
                inverted bounds. The tree is left unchanged.
        """
        item.envelope.validate()
        self._insert(item, level=1)
        self._count += 1

    def _choose_subtree(self, envelope, level):
        '''
        Descends from the root to the node of height `level` best suited to
        receive an entry bound by `envelope`. Returns the descent path.
        '''
        node = self._root
        path = [node]
        while node.height > level:
            node = min(node.children, key=_enlargement_key(envelope))
            path.append(node)
        return path

    def _insert(self, entry, level):
        '''
        Adds `entry` to a node of height `level`: an object for level 1, or
        a node of height `level` - 1.
        '''
        envelope = entry.envelope
        path = self._choose_subtree(envelope, level)
        path[-1].add(entry)
        for node in path[:-1]:
            node.envelope.extend(envelope)
        # Split overflowing nodes, bottom-up.
        for depth in range(len(path) - 1, -1, -1):
            if len(path[depth]) <= self.max_entries:
                break
            self._split(path, depth)

    # ----- Split

    def _split(self, path, depth):
        node = path[depth]
        self._choose_split_axis(node)
        index = self._choose_split_index(node)
        sibling = Node(node.children[index:], height=node.height)
        node.children = node.children[:index]
        node.reset_envelope()
        if depth > 0:
            path[depth - 1].add(sibling)
        else:
            self._root = Node([node, sibling], height=node.height + 1)
            logger.debug("Root split, tree height is now %d", self.height)

    def _distribution_margin(self, children):
        '''
        Sum of the margins of both groups over every legal distribution of
        the sorted `children`.
        '''
        m = self.min_entries
        total = len(children)
        left = Envelope.merge(c.envelope for c in children[:m])
        right = Envelope.merge(c.envelope for c in children[total - m:])
        margin = left.margin + right.margin
        for child in children[m:total - m]:
            margin += left.extend(child.envelope).margin
        for child in reversed(children[m:total - m]):
            margin += right.extend(child.envelope).margin
        return margin

    def _choose_split_axis(self, node):
        '''Sorts the children of `node` along the best split axis.'''
        by_x = sorted(node.children, key=_by_minx)
        by_y = sorted(node.children, key=_by_miny)
        if self._distribution_margin(by_y) < self._distribution_margin(by_x):
            node.children = by_y
        else:
            node.children = by_x

    def _choose_split_index(self, node):
        '''
        Index of the sorted children of `node` where the split has the least
        overlap, then the least total area.
        '''
        m = self.min_entries
        children = node.children
        total = len(children)
        lefts = list(toolz.accumulate(
            _union, children[1:], children[0].envelope))
        rights = list(toolz.accumulate(
            _union, reversed(children[:-1]), children[-1].envelope))[::-1]
        # lefts[i - 1] bounds children[:i], rights[i] bounds children[i:].
        best, best_key = total - m, None
        for index in range(m, total - m + 1):
            left, right = lefts[index - 1], rights[index]
            key = (left.intersection_area(right), left.area + right.area)
            if best_key is None or key < best_key:
                best, best_key = index, key
        return best

    # ----- Delete

    def _find_leaf(self, item):
        '''
        Path from the root to the leaf holding `item`, or None.

        Subtrees whose envelope does not contain the envelope of `item` are
        pruned; since envelopes overlap, several paths may be tried.
        '''
        envelope = item.envelope
        stack = [[self._root]]
        while stack:
            path = stack.pop()
            node = path[-1]
            if not node.envelope.contains(envelope):
                continue
            if node.is_leaf:
                if any(child == item for child in node.children):
                    return path
                continue
            stack.extend(path + [child] for child in reversed(node.children))
        return None

    def delete(self, item):
        """
        Removes `item`, compared with ==.

        Returns:
            bool: False if `item` is not in the tree, True otherwise.
        """
        path = self._find_leaf(item)
        if path is None:
            logger.debug("Item %r not found, nothing deleted", item)
            return False
        leaf = path[-1]
        index = next(i for i, child in enumerate(leaf.children)
                     if child == item)
        del leaf.children[index]
        self._count -= 1
        self._condense(path)
        return True

    def _condense(self, path):
        '''
        Restores the fan-out and envelope invariants along `path` after a
        removal in its leaf.
        '''
        orphans = []
        for depth in range(len(path) - 1, 0, -1):
            node, parent = path[depth], path[depth - 1]
            if len(node) < self.min_entries:
                parent.children.remove(node)
                orphans.append(node)
            else:
                node.reset_envelope()
        self._root.reset_envelope()
        if orphans:
            logger.debug("Reinserting the entries of %d underfull nodes",
                         len(orphans))
        # Orphans are collected bottom-up; reinsert the highest subtrees first.
        for orphan in reversed(orphans):
            for entry in orphan.children:
                self._insert(entry, level=orphan.height)
        while not self._root.is_leaf and len(self._root) == 1:
            self._root = self._root.children[0]
            logger.debug("Root collapsed, tree height is now %d",
                         self.height)

    # ----- Bulk load

    def bulk_load(self, items):
        """
        Inserts a batch of objects.

        An empty tree receives a packed tree. Otherwise the packed tree is
        merged in as a subtree, or as a sibling of the root when both trees
        have the same height.

        Raises:
            InvalidEnvelopeError: if any envelope has NaN or inverted bounds.
                The tree is left unchanged.
        """
        items = list(items)
        for item in items:
            item.envelope.validate()
        if len(items) < self.min_entries:
            for item in items:
                self._insert(item, level=1)
                self._count += 1
            return
        packed = packing.sort_tile_recurse(items, page_size=self.max_entries)
        logger.debug("Packed %d items into a tree of height %d",
                     len(items), packed.height)
        self._count += len(items)
        if len(self._root) == 0:
            self._root = packed
        elif self._root.height == packed.height:
            self._root = Node([self._root, packed],
                              height=packed.height + 1)
        else:
            if self._root.height < packed.height:
                self._root, packed = packed, self._root
            self._insert(packed, level=packed.height + 1)


class IndexView(SpatialIndex):
    """
    Read-only view of a :class:`RTree`.

    The view shares the tree: later mutations of the tree are visible through
    it. It only hides the mutating methods from its holders.
    """
    __slots__ = ('_tree',)

    def __init__(self, tree):
        self._tree = tree

    def __repr__(self):
        return "<{} of {!r}>".format(self.__class__.__name__, self._tree)

    def __len__(self):
        return len(self._tree)

    def __iter__(self):
        return self._tree.search()

    def __contains__(self, item):
        return item in self._tree

    @property
    def envelope(self):
        return self._tree.envelope

    def search(self, envelope=None):
        return self._tree.search(envelope)
