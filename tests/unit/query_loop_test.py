import io
import json
import os
import tempfile

from geoindex.algorithms import kd_tree
from geoindex.algorithms.binsort import BinsortIndex
from geoindex.data_models import Record
from geoindex.query_loop import QueryReport, coord_query_loop, id_query_loop
from geoindex.utils import utils


def make_records():
    return [
        Record(osm_id=1, name="A", lon=0.0, lat=0.0),
        Record(osm_id=2, name="B", lon=10.0, lat=0.0),
        Record(osm_id=3, name="C", lon=5.0, lat=5.0),
    ]


class TestCoordQueryLoop:
    def setup_method(self):
        self.logger = utils.GeoIndexLogger(printout=False)
        self.index = kd_tree.build_index(make_records())

    def test_answers(self):
        out = io.StringIO()
        report = coord_query_loop(self.index, ["4 4\n", "\n", "9.5 -1\n"], out, self.logger)
        assert out.getvalue().splitlines() == [
            "(4.0,4.0): 3 C (5.0,5.0)",
            "(9.5,-1.0): 2 B (10.0,0.0)",
        ]
        assert report.index_name == "kdtree"
        assert report.n_records == 3
        assert report.n_queries == 2
        assert report.n_found == 2
        assert report.total_query_time_us >= 0
        assert sum("Query time" in m for m in self.logger.messages()) == 2

    def test_malformed_lines_are_skipped(self):
        out = io.StringIO()
        report = coord_query_loop(self.index, ["abc def", "1", "0 0"], out, self.logger)
        assert report.n_malformed == 2
        assert report.n_queries == 1
        assert out.getvalue() == "(0.0,0.0): 1 A (0.0,0.0)\n"
        assert any("Malformed query" in m for m in self.logger.messages())

    def test_non_finite_queries_are_malformed(self):
        out = io.StringIO()
        report = coord_query_loop(
            self.index, ["nan nan", "inf 0", "1 -inf", "1 0"], out, self.logger
        )
        assert report.n_malformed == 3
        assert report.n_queries == 1
        assert report.n_found == 1
        assert out.getvalue() == "(1.0,0.0): 1 A (0.0,0.0)\n"

    def test_destroyed_index(self):
        kd_tree.destroy_index(self.index)
        out = io.StringIO()
        report = coord_query_loop(self.index, ["1 1"], out, self.logger)
        assert out.getvalue() == "(1.0,1.0): not found\n"
        assert report.n_found == 0


class TestIdQueryLoop:
    def test_answers(self):
        logger = utils.GeoIndexLogger(printout=False)
        index = BinsortIndex.build(make_records())
        out = io.StringIO()
        report = id_query_loop(index, ["2", "99", "x"], out, logger)
        assert out.getvalue().splitlines() == ["2: 2 B (10.0,0.0)", "99: not found"]
        assert report.n_queries == 2
        assert report.n_found == 1
        assert report.n_malformed == 1


class TestQueryReport:
    def test_mean_and_save(self):
        report = QueryReport(index_name="naive", n_queries=4, total_query_time_us=10.0)
        assert report.mean_query_time_us == 2.5
        assert QueryReport(index_name="naive").mean_query_time_us == 0.0
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "report.json")
            report.save(path)
            with open(path) as f:
                data = json.load(f)
        assert data["index_name"] == "naive"
        assert data["n_queries"] == 4
