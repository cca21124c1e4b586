import typing as t

import yaml
from pydantic import BaseModel, ConfigDict

LON_AXIS = 0
LAT_AXIS = 1
K = 2
"""Number of coordinate dimensions"""


class Coordinate(t.NamedTuple):
    lon: float
    lat: float


class Record(BaseModel):
    """A geographic record. Indexes only ever hold references to records, they
    never copy them."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    osm_id: int
    name: str
    lon: float
    lat: float

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lon, self.lat)


def axis_value(record: Record, axis: int) -> float:
    return record.lon if axis == LON_AXIS else record.lat


# YAML MODELS


class GeoIndexConfigYamlModel(BaseModel):
    coord_index: str | None = None
    id_index: str | None = None
    stable_partition: bool | None = None
    print_tree: bool | None = None
    log_printout: bool | None = None
    limit: int | None = None


def config_from_yaml(file_path: str) -> GeoIndexConfigYamlModel:
    with open(file_path, "r") as stream:
        config = yaml.safe_load(stream)
    return GeoIndexConfigYamlModel(**(config or {}))
