import csv
import typing as t

from geoindex.data_models import Record
from geoindex.exceptions import RecordLoadError

REQUIRED_COLUMNS = ("osm_id", "name", "lon", "lat")


def load_records(file_path: str, limit: t.Optional[int] = None) -> t.List[Record]:
    """Read records from a tab-separated file whose first row names the columns.

    Only the `osm_id`, `name`, `lon` and `lat` columns are used, others are ignored.
    """
    with open(file_path, "r", newline="", encoding="utf-8") as f:
        return read_records(f, limit=limit)


def read_records(stream: t.Iterable[str], limit: t.Optional[int] = None) -> t.List[Record]:
    reader = csv.reader(stream, delimiter="\t", quoting=csv.QUOTE_NONE)
    header = next(reader, None)
    if header is None:
        raise RecordLoadError("Missing header row", 1)

    missing = [c for c in REQUIRED_COLUMNS if c not in header]
    if missing:
        raise RecordLoadError("Missing columns: {}".format(", ".join(missing)), 1)
    columns = {c: header.index(c) for c in REQUIRED_COLUMNS}

    records: t.List[Record] = []
    for row in reader:
        if limit is not None and len(records) >= limit:
            break
        if not row:
            continue
        try:
            records.append(
                Record(
                    osm_id=int(row[columns["osm_id"]]),
                    name=row[columns["name"]],
                    lon=float(row[columns["lon"]]),
                    lat=float(row[columns["lat"]]),
                )
            )
        except (IndexError, ValueError) as err:
            raise RecordLoadError(str(err), reader.line_num) from err
    return records
