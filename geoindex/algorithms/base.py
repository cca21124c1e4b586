import abc
import typing as t

from typing_extensions import Self

from geoindex.data_models import Record
from geoindex.exceptions import IndexBuildError, InvalidAxisError
from geoindex.utils import utils

Key = t.TypeVar("Key")


class RecordIndex(abc.ABC, t.Generic[Key]):
    """Common shape shared by every index strategy: build, lookup, destroy.

    An index references the records of the store it was built from and never
    copies or frees them. The store must not be mutated while an index built
    from it is alive.
    """

    name: t.ClassVar[str]

    @classmethod
    @abc.abstractmethod
    def build(
        cls, records: t.Optional[t.List[Record]], **options: t.Any
    ) -> t.Optional[Self]:
        """Build an index over `records`, returning None for an absent or empty store.

        Strategies ignore the `options` they do not understand.
        """

    @abc.abstractmethod
    def lookup(self, key: Key) -> t.Optional[Record]:
        pass

    @abc.abstractmethod
    def destroy(self) -> None:
        """Release the index structure. Calling it again is a no-op."""

    @abc.abstractmethod
    def __len__(self) -> int:
        pass

    def format_index(self) -> t.List[str]:
        """Human readable dump of the index structure, empty when there is none."""
        return []


def build_or_none(
    index_cls: t.Type[RecordIndex],
    records: t.Optional[t.List[Record]],
    logger: t.Optional[utils.GeoIndexLogger] = None,
    **options: t.Any,
) -> t.Optional[RecordIndex]:
    """Build any index strategy, turning a failed build into None.

    Failures are logged when a logger is given. An empty store also gives None.
    """
    try:
        return index_cls.build(records, **options)
    except (IndexBuildError, InvalidAxisError) as err:
        if logger is not None:
            logger.log("Failed to build '{}' index: {}".format(index_cls.name, err))
        return None
