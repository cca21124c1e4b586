import typing as t

from typing_extensions import Self

from geoindex.algorithms.base import RecordIndex
from geoindex.data_models import Coordinate, Record
from geoindex.utils import utils


class NaiveIndex(RecordIndex[Coordinate]):
    """Linear scan over the record store. Ties keep the earliest record."""

    name = "naive"

    def __init__(self, records: t.List[Record]):
        self.records: t.List[Record] | None = records

    @classmethod
    def build(
        cls, records: t.Optional[t.List[Record]], **options: t.Any
    ) -> t.Optional[Self]:
        if not records:
            return None
        return cls(records)

    def lookup(self, key: t.Sequence[float]) -> t.Optional[Record]:
        if not self.records:
            return None

        point = (key[0], key[1])
        closest = self.records[0]
        closest_dist = utils.euclidean_distance((closest.lon, closest.lat), point)
        for record in self.records[1:]:
            dist = utils.euclidean_distance((record.lon, record.lat), point)
            if dist < closest_dist:
                closest = record
                closest_dist = dist
        return closest

    def destroy(self) -> None:
        self.records = None

    def __len__(self) -> int:
        return len(self.records) if self.records else 0
