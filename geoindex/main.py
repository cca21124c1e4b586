import sys
import time
import typing as t

import typer

import geoindex.config as config
from geoindex.algorithms import kd_tree
from geoindex.algorithms.base import RecordIndex, build_or_none
from geoindex.data_models import GeoIndexConfigYamlModel, Record, config_from_yaml
from geoindex.indexes import get_coord_index, get_id_index
from geoindex.query_loop import QueryReport, coord_query_loop, id_query_loop
from geoindex.records import load_records
from geoindex.utils import utils

app = typer.Typer()


class Settings:
    """Effective settings: CLI flags override the YAML file, which overrides
    the defaults in `geoindex.config`."""

    def __init__(
        self,
        yaml_config: GeoIndexConfigYamlModel,
        *,
        index: str | None = None,
        limit: int | None = None,
        stable: bool | None = None,
        print_tree: bool | None = None,
        coord: bool,
    ):
        default_index = config.DEFAULT_COORD_INDEX if coord else config.DEFAULT_ID_INDEX
        yaml_index = yaml_config.coord_index if coord else yaml_config.id_index
        self.index = _first(index, yaml_index, default_index)
        self.limit = _first(limit, yaml_config.limit)
        self.stable = _first(stable, yaml_config.stable_partition, config.STABLE_PARTITION)
        self.print_tree = _first(print_tree, yaml_config.print_tree, config.PRINT_TREE)
        self.log_printout = _first(yaml_config.log_printout, config.LOG_PRINTOUT)


def _first(*values: t.Any) -> t.Any:
    return next((v for v in values if v is not None), None)


def _load_yaml(config_file: str | None) -> GeoIndexConfigYamlModel:
    if config_file is None:
        return GeoIndexConfigYamlModel()
    return config_from_yaml(config_file)


def _load(dataset: str, limit: int | None, logger: utils.GeoIndexLogger, report: QueryReport):
    start = time.perf_counter()
    records = load_records(dataset, limit=limit)
    report.load_time_ms = (time.perf_counter() - start) * 1e3
    report.n_records = len(records)
    logger.log("Read {} records in {:.0f} ms".format(len(records), report.load_time_ms))
    return records


def _build(
    index_cls: t.Type[RecordIndex],
    records: t.List[Record],
    settings: Settings,
    logger: utils.GeoIndexLogger,
    report: QueryReport,
) -> RecordIndex | None:
    start = time.perf_counter()
    index = build_or_none(index_cls, records, logger=logger, stable=settings.stable)
    report.build_time_ms = (time.perf_counter() - start) * 1e3
    if index is None:
        logger.log("No '{}' index was built".format(index_cls.name))
        return None
    logger.log("Built '{}' index in {:.0f} ms".format(index_cls.name, report.build_time_ms))

    if settings.print_tree:
        for line in index.format_index():
            print(line, file=sys.stderr)
    return index


def _run(
    *,
    dataset: str,
    settings: Settings,
    index_cls: t.Type[RecordIndex],
    loop: t.Callable[..., QueryReport],
    report_file: str | None,
    logs_file: str | None,
):
    logger = utils.GeoIndexLogger(printout=settings.log_printout)
    report = QueryReport(index_name=index_cls.name)
    records = _load(dataset, settings.limit, logger, report)

    index = _build(index_cls, records, settings, logger, report)
    if index is None:
        if logs_file is not None:
            logger.save(logs_file)
        raise typer.Exit(code=1)

    try:
        loop(index, sys.stdin, sys.stdout, logger, report)
    finally:
        index.destroy()

    logger.log(
        "Answered {} queries, mean query time {:.0f} us".format(
            report.n_queries, report.mean_query_time_us
        ),
        report.n_queries,
    )
    if report_file is not None:
        report.save(report_file)
        logger.log("Saved report at: {}".format(report_file), report.n_queries)
    if logs_file is not None:
        logger.save(logs_file)


@app.command()
def coord_query(
    dataset: str,
    index: t.Annotated[t.Optional[str], typer.Option("--index")] = None,
    config_file: t.Annotated[t.Optional[str], typer.Option("--config")] = None,
    report_file: t.Annotated[t.Optional[str], typer.Option("--report")] = None,
    logs_file: t.Annotated[t.Optional[str], typer.Option("--logs")] = None,
    limit: t.Annotated[t.Optional[int], typer.Option("--limit")] = None,
    print_tree: t.Annotated[
        t.Optional[bool], typer.Option("--print-tree/--no-print-tree")
    ] = None,
    stable: t.Annotated[t.Optional[bool], typer.Option("--stable/--no-stable")] = None,
):
    """Nearest-record lookups, one `lon lat` pair per line on stdin."""
    settings = Settings(
        _load_yaml(config_file),
        index=index,
        limit=limit,
        stable=stable,
        print_tree=print_tree,
        coord=True,
    )
    _run(
        dataset=dataset,
        settings=settings,
        index_cls=get_coord_index(settings.index),
        loop=coord_query_loop,
        report_file=report_file,
        logs_file=logs_file,
    )


@app.command()
def id_query(
    dataset: str,
    index: t.Annotated[t.Optional[str], typer.Option("--index")] = None,
    config_file: t.Annotated[t.Optional[str], typer.Option("--config")] = None,
    report_file: t.Annotated[t.Optional[str], typer.Option("--report")] = None,
    logs_file: t.Annotated[t.Optional[str], typer.Option("--logs")] = None,
    limit: t.Annotated[t.Optional[int], typer.Option("--limit")] = None,
):
    """Record lookups by identifier, one per line on stdin."""
    settings = Settings(_load_yaml(config_file), index=index, limit=limit, coord=False)
    _run(
        dataset=dataset,
        settings=settings,
        index_cls=get_id_index(settings.index),
        loop=id_query_loop,
        report_file=report_file,
        logs_file=logs_file,
    )


@app.command()
def print_tree(
    dataset: str,
    limit: t.Annotated[t.Optional[int], typer.Option("--limit")] = None,
    stable: t.Annotated[bool, typer.Option("--stable")] = False,
):
    records = load_records(dataset, limit=limit)
    index = kd_tree.build_index(records, stable=stable)
    if index is None:
        typer.echo("--- K-D Tree is empty ---")
        return
    try:
        for line in index.format_index():
            typer.echo(line)
    finally:
        kd_tree.destroy_index(index)


if __name__ == "__main__":
    app()
