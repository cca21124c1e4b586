import math
import time
import typing as t

from pydantic import BaseModel

from geoindex.algorithms.base import RecordIndex
from geoindex.data_models import Coordinate, Record
from geoindex.utils import utils


class QueryReport(BaseModel):
    index_name: str
    n_records: int = 0

    load_time_ms: float = 0.0
    """Time spent reading the record store"""

    build_time_ms: float = 0.0
    """Time spent building the index, including any reordering of the store"""

    n_queries: int = 0
    n_found: int = 0
    n_malformed: int = 0
    """Input lines that could not be parsed as a query"""

    total_query_time_us: float = 0.0

    @property
    def mean_query_time_us(self) -> float:
        return self.total_query_time_us / self.n_queries if self.n_queries else 0.0

    def save(self, path: str):
        with open(path, "w") as f:
            f.write(self.model_dump_json(indent=4))


def _format_record(record: Record) -> str:
    return "{} {} ({},{})".format(record.osm_id, record.name, record.lon, record.lat)


def _run_queries(
    *,
    index: RecordIndex,
    lines: t.Iterable[str],
    out: t.TextIO,
    logger: utils.GeoIndexLogger,
    report: QueryReport,
    parse: t.Callable[[str], t.Any],
    label: t.Callable[[t.Any], str],
) -> QueryReport:
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            key = parse(line)
        except ValueError:
            report.n_malformed += 1
            logger.log("Malformed query: '{}'".format(line), report.n_queries)
            continue

        start = time.perf_counter()
        record = index.lookup(key)
        elapsed_us = (time.perf_counter() - start) * 1e6

        report.n_queries += 1
        report.total_query_time_us += elapsed_us
        if record is None:
            out.write("{}: not found\n".format(label(key)))
        else:
            report.n_found += 1
            out.write("{}: {}\n".format(label(key), _format_record(record)))
        logger.log("Query time: {:.0f} us".format(elapsed_us), report.n_queries)
    return report


def _parse_coordinate(line: str) -> Coordinate:
    parts = line.split()
    if len(parts) != 2:
        raise ValueError("Expected 'lon lat', got '{}'".format(line))
    lon, lat = float(parts[0]), float(parts[1])
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise ValueError("Non-finite coordinate in '{}'".format(line))
    return Coordinate(lon, lat)


def coord_query_loop(
    index: RecordIndex,
    lines: t.Iterable[str],
    out: t.TextIO,
    logger: utils.GeoIndexLogger,
    report: QueryReport | None = None,
) -> QueryReport:
    """Answer one nearest-record query per `lon lat` input line."""
    return _run_queries(
        index=index,
        lines=lines,
        out=out,
        logger=logger,
        report=report or QueryReport(index_name=type(index).name, n_records=len(index)),
        parse=_parse_coordinate,
        label=lambda c: "({},{})".format(c.lon, c.lat),
    )


def id_query_loop(
    index: RecordIndex,
    lines: t.Iterable[str],
    out: t.TextIO,
    logger: utils.GeoIndexLogger,
    report: QueryReport | None = None,
) -> QueryReport:
    """Answer one identifier lookup per input line."""
    return _run_queries(
        index=index,
        lines=lines,
        out=out,
        logger=logger,
        report=report or QueryReport(index_name=type(index).name, n_records=len(index)),
        parse=int,
        label=str,
    )
