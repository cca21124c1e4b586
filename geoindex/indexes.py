import typing as t

from geoindex.algorithms.base import RecordIndex
from geoindex.algorithms.binsort import BinsortIndex
from geoindex.algorithms.kd_tree import KDTreeIndex
from geoindex.algorithms.naive import NaiveIndex
from geoindex.exceptions import UnknownIndexError

COORD_INDEXES: t.Dict[str, t.Type[RecordIndex]] = {
    NaiveIndex.name: NaiveIndex,
    KDTreeIndex.name: KDTreeIndex,
}

ID_INDEXES: t.Dict[str, t.Type[RecordIndex]] = {
    BinsortIndex.name: BinsortIndex,
}


def get_coord_index(name: str) -> t.Type[RecordIndex]:
    if name not in COORD_INDEXES:
        raise UnknownIndexError(name, COORD_INDEXES.keys())
    return COORD_INDEXES[name]


def get_id_index(name: str) -> t.Type[RecordIndex]:
    if name not in ID_INDEXES:
        raise UnknownIndexError(name, ID_INDEXES.keys())
    return ID_INDEXES[name]
