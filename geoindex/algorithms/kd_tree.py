import typing as t

import numpy as np
from typing_extensions import Self

from geoindex.algorithms.base import RecordIndex, build_or_none
from geoindex.data_models import K, LAT_AXIS, LON_AXIS, Coordinate, Record, axis_value
from geoindex.exceptions import IndexBuildError, InvalidAxisError
from geoindex.utils import utils

NO_NODE = -1
"""Arena position standing for an absent child"""

AXIS_LABELS = {LON_AXIS: "LON", LAT_AXIS: "LAT"}


class KDNode:
    def __init__(self, record: Record, axis: int):
        self.record = record  # Reference into the record store, never a copy
        self.axis = axis
        self.left = NO_NODE
        self.right = NO_NODE


def select_pivot(
    records: t.List[Record], lo: int, hi: int, axis: int, stable: bool = False
) -> int:
    """Median partition of `records[lo:hi]` on `axis`, in place.

    Afterwards the element at `lo + (hi - lo) // 2` (upper median for even
    counts) has every element before it with axis-value <= its own and every
    element after it with axis-value >= its own. Returns that position.

    With `stable=False` numpy's introselect is used and the relative order of
    records sharing the pivot value is unspecified. With `stable=True` a stable
    sort keeps their original relative order, making the tree shape reproducible.
    """
    if axis != LON_AXIS and axis != LAT_AXIS:
        raise InvalidAxisError(axis)
    n = hi - lo
    if n <= 0:
        raise ValueError("Cannot select a pivot from an empty range")

    mid = n // 2
    window = records[lo:hi]
    keys = np.fromiter((axis_value(r, axis) for r in window), dtype=np.float64, count=n)
    if stable:
        order = np.argsort(keys, kind="stable")
    else:
        order = np.argpartition(keys, mid)
    records[lo:hi] = [window[i] for i in order]
    return lo + mid


class KDTree:
    """Two-dimensional k-d tree over (lon, lat), stored as an arena of nodes.

    Children are arena positions, `NO_NODE` marks an absent child. Building
    permutes the record store in place; callers needing the original order must
    copy it beforehand. The tree is read-only once built.
    """

    def __init__(self):
        self.nodes: t.List[KDNode] = []
        self.root = NO_NODE

    @classmethod
    def from_records(cls, records: t.List[Record], stable: bool = False) -> "KDTree":
        tree = cls()
        try:
            tree.root = tree._build(records, 0, len(records), 0, stable)
        except MemoryError as err:
            tree.destroy()
            raise IndexBuildError(
                "Out of memory while building k-d tree over {} records".format(
                    len(records)
                )
            ) from err
        return tree

    def _build(
        self, records: t.List[Record], lo: int, hi: int, depth: int, stable: bool
    ) -> int:
        if hi <= lo:
            return NO_NODE

        axis = depth % K
        pivot = select_pivot(records, lo, hi, axis, stable)

        node_idx = len(self.nodes)
        node = KDNode(records[pivot], axis)
        self.nodes.append(node)

        # The recursive calls only reorder records strictly before/after the pivot
        node.left = self._build(records, lo, pivot, depth + 1, stable)
        node.right = self._build(records, pivot + 1, hi, depth + 1, stable)
        return node_idx

    def find_nearest(self, query: t.Sequence[float]) -> t.Optional[Record]:
        """Exact nearest neighbor of `query` (lon, lat) by Euclidean distance."""
        if self.root == NO_NODE:
            return None

        point = (query[0], query[1])
        best = self.root
        best_distance = _distance(self.nodes[self.root].record, point)

        def _search(node_idx: int) -> None:
            nonlocal best, best_distance
            if node_idx == NO_NODE:
                return

            node = self.nodes[node_idx]
            distance = _distance(node.record, point)
            if distance < best_distance:
                best = node_idx
                best_distance = distance

            # Signed distance from the query to the splitting line of this node
            diff = axis_value(node.record, node.axis) - point[node.axis]

            if diff >= 0 or best_distance > abs(diff):
                _search(node.left)
            if diff <= 0 or best_distance > abs(diff):
                _search(node.right)

        _search(self.root)
        return self.nodes[best].record

    def destroy(self) -> None:
        self.nodes.clear()
        self.root = NO_NODE

    def __len__(self) -> int:
        return len(self.nodes)

    def iter_nodes(self) -> t.Iterator[t.Tuple[int, KDNode]]:
        """Pre-order walk yielding (depth, node) pairs."""
        stack = [(0, self.root)] if self.root != NO_NODE else []
        while stack:
            depth, node_idx = stack.pop()
            node = self.nodes[node_idx]
            yield depth, node
            if node.right != NO_NODE:
                stack.append((depth + 1, node.right))
            if node.left != NO_NODE:
                stack.append((depth + 1, node.left))

    def height(self) -> int:
        return max((depth + 1 for depth, _ in self.iter_nodes()), default=0)

    def format_tree(self) -> t.List[str]:
        """Sideways rendering of the tree, right branch printed higher."""
        if self.root == NO_NODE:
            return ["--- K-D Tree is empty ---"]

        lines: t.List[str] = []

        def _format(node_idx: int, depth: int) -> None:
            if node_idx == NO_NODE:
                return
            node = self.nodes[node_idx]
            _format(node.right, depth + 1)
            lines.append(
                "{}|- [D:{} | Split:{}] ({:.6f}, {:.6f}) ID: {}".format(
                    "    " * depth,
                    depth,
                    AXIS_LABELS[node.axis],
                    node.record.lon,
                    node.record.lat,
                    node.record.osm_id,
                )
            )
            _format(node.left, depth + 1)

        _format(self.root, 0)
        return lines


def _distance(record: Record, point: t.Tuple[float, float]) -> float:
    return utils.euclidean_distance((record.lon, record.lat), point)


class KDTreeIndex(RecordIndex[Coordinate]):
    name = "kdtree"

    def __init__(self, tree: KDTree):
        self.tree = tree

    @classmethod
    def build(
        cls, records: t.Optional[t.List[Record]], stable: bool = False, **options: t.Any
    ) -> t.Optional[Self]:
        if not records:
            return None
        return cls(KDTree.from_records(records, stable=stable))

    def lookup(self, key: t.Sequence[float]) -> t.Optional[Record]:
        return self.tree.find_nearest(key)

    def destroy(self) -> None:
        self.tree.destroy()

    def __len__(self) -> int:
        return len(self.tree)

    def format_index(self) -> t.List[str]:
        return self.tree.format_tree()


def build_index(
    records: t.Optional[t.List[Record]],
    stable: bool = False,
    logger: t.Optional[utils.GeoIndexLogger] = None,
) -> t.Optional[KDTreeIndex]:
    """Build a k-d tree index, or None for an empty store or a failed build.

    The store is permuted in place.
    """
    return t.cast(
        t.Optional[KDTreeIndex],
        build_or_none(KDTreeIndex, records, logger=logger, stable=stable),
    )


def destroy_index(index: t.Optional[KDTreeIndex]) -> None:
    if index is not None:
        index.destroy()


def find_nearest(
    index: t.Optional[KDTreeIndex], longitude: float, latitude: float
) -> t.Optional[Record]:
    if index is None:
        return None
    return index.lookup(Coordinate(longitude, latitude))
