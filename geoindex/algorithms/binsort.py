import typing as t

import numpy as np
import numpy.typing as npt
from typing_extensions import Self

from geoindex.algorithms.base import RecordIndex
from geoindex.data_models import Record


class BinsortIndex(RecordIndex[int]):
    """Records sorted by identifier, looked up by binary search.

    The store itself is left untouched, the index keeps its own sorted
    (identifier, record) pairs.
    """

    name = "binsort"

    def __init__(self, ids: npt.NDArray[np.int64], records: t.List[Record]):
        self.ids = ids
        self.records = records

    @classmethod
    def build(
        cls, records: t.Optional[t.List[Record]], **options: t.Any
    ) -> t.Optional[Self]:
        if not records:
            return None
        ids = np.fromiter((r.osm_id for r in records), dtype=np.int64, count=len(records))
        order = np.argsort(ids, kind="stable")
        return cls(ids[order], [records[i] for i in order])

    def lookup(self, key: int) -> t.Optional[Record]:
        if len(self.records) == 0:
            return None
        i = int(np.searchsorted(self.ids, key, side="left"))
        if i < len(self.ids) and self.ids[i] == key:
            return self.records[i]
        return None

    def destroy(self) -> None:
        self.ids = np.empty(0, dtype=np.int64)
        self.records = []

    def __len__(self) -> int:
        return len(self.records)
