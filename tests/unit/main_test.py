import json
import os
import tempfile

from typer.testing import CliRunner

from geoindex.algorithms.kd_tree import KDTreeIndex
from geoindex.data_models import GeoIndexConfigYamlModel
from geoindex.main import Settings, app

DATASET = (
    "name\tosm_id\tlon\tlat\n"
    "A\t1\t0.0\t0.0\n"
    "B\t2\t10.0\t0.0\n"
    "C\t3\t5.0\t5.0\n"
)


class TestCli:
    def setup_method(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.dataset = os.path.join(self.tmp.name, "places.tsv")
        with open(self.dataset, "w", encoding="utf-8") as f:
            f.write(DATASET)
        self.config = os.path.join(self.tmp.name, "config.yaml")
        with open(self.config, "w") as f:
            f.write("log_printout: false\n")

    def teardown_method(self):
        self.tmp.cleanup()

    def test_coord_query(self):
        for index in ["kdtree", "naive"]:
            result = self.runner.invoke(
                app,
                ["coord-query", self.dataset, "--index", index, "--config", self.config],
                input="4 4\n100 -100\n",
            )
            assert result.exit_code == 0, result.output
            assert "(4.0,4.0): 3 C (5.0,5.0)" in result.output
            assert "(100.0,-100.0): 2 B (10.0,0.0)" in result.output

    def test_id_query_with_report(self):
        report_path = os.path.join(self.tmp.name, "report.json")
        result = self.runner.invoke(
            app,
            ["id-query", self.dataset, "--config", self.config, "--report", report_path],
            input="3\n4\n",
        )
        assert result.exit_code == 0, result.output
        assert "3: 3 C (5.0,5.0)" in result.output
        assert "4: not found" in result.output
        with open(report_path) as f:
            report = json.load(f)
        assert report["index_name"] == "binsort"
        assert report["n_records"] == 3
        assert report["n_queries"] == 2
        assert report["n_found"] == 1

    def test_empty_dataset_fails(self):
        empty = os.path.join(self.tmp.name, "empty.tsv")
        with open(empty, "w") as f:
            f.write("name\tosm_id\tlon\tlat\n")
        result = self.runner.invoke(
            app, ["coord-query", empty, "--config", self.config], input="0 0\n"
        )
        assert result.exit_code == 1

    def test_print_tree(self):
        result = self.runner.invoke(app, ["print-tree", self.dataset])
        assert result.exit_code == 0, result.output
        assert "|- [D:0 | Split:LON] (5.000000, 5.000000) ID: 3" in result.output

    def write_config(self, text: str) -> str:
        path = os.path.join(self.tmp.name, "override.yaml")
        with open(path, "w") as f:
            f.write("log_printout: false\n" + text)
        return path

    def test_cli_turns_off_yaml_print_tree(self):
        config = self.write_config("print_tree: true\n")
        result = self.runner.invoke(
            app, ["coord-query", self.dataset, "--config", config], input="4 4\n"
        )
        assert result.exit_code == 0, result.output
        assert "Split:LON" in result.output

        result = self.runner.invoke(
            app,
            ["coord-query", self.dataset, "--config", config, "--no-print-tree"],
            input="4 4\n",
        )
        assert result.exit_code == 0, result.output
        assert "Split:LON" not in result.output
        assert "(4.0,4.0): 3 C (5.0,5.0)" in result.output

    def test_cli_turns_off_yaml_stable(self):
        config = self.write_config("stable_partition: true\n")
        result = self.runner.invoke(
            app,
            ["coord-query", self.dataset, "--config", config, "--no-stable"],
            input="4 4\n",
        )
        assert result.exit_code == 0, result.output
        assert "(4.0,4.0): 3 C (5.0,5.0)" in result.output

    def test_settings_precedence(self):
        yaml_config = GeoIndexConfigYamlModel(stable_partition=True, print_tree=True)
        settings = Settings(yaml_config, stable=False, print_tree=False, coord=True)
        assert settings.stable is False
        assert settings.print_tree is False
        settings = Settings(yaml_config, coord=True)
        assert settings.stable is True
        assert settings.print_tree is True
        assert settings.index == "kdtree"

    def test_same_build_path_for_every_index(self):
        for index in ["kdtree", "naive"]:
            logs_path = os.path.join(self.tmp.name, "{}.json".format(index))
            result = self.runner.invoke(
                app,
                [
                    "coord-query",
                    self.dataset,
                    "--index",
                    index,
                    "--config",
                    self.config,
                    "--stable",
                    "--logs",
                    logs_path,
                ],
                input="0 0\n",
            )
            assert result.exit_code == 0, result.output
            with open(logs_path) as f:
                logs = json.load(f)
            messages = [x["message"] for x in logs]
            assert any(m.startswith("Built '{}' index".format(index)) for m in messages)
            assert all("timestamp" in x and "step" in x for x in logs)

    def test_print_tree_releases_index_on_error(self, monkeypatch):
        destroyed = []

        def _failing_format(self):
            raise RuntimeError("broken output")

        def _destroy(self):
            destroyed.append(len(self.tree))
            self.tree.destroy()

        monkeypatch.setattr(KDTreeIndex, "format_index", _failing_format)
        monkeypatch.setattr(KDTreeIndex, "destroy", _destroy)
        result = self.runner.invoke(app, ["print-tree", self.dataset])
        assert isinstance(result.exception, RuntimeError)
        assert destroyed == [3]
