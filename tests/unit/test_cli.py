"""Tests for the tablecast command line."""

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from tablecast.cli.main import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    path = tmp_path / "people.schema.yaml"
    path.write_text(
        "fields:\n"
        "  - name: id\n    type: integer\n    constraints: {required: true, unique: true}\n"
        "  - name: name\n    type: string\n"
        "  - name: score\n    type: number\n    constraints: {maximum: 100}\n"
    )
    return path


class TestInferCommand:
    """Tests for `tablecast infer`."""

    def test_prints_yaml(self, runner, people_csv):
        result = runner.invoke(main, ["infer", str(people_csv)])
        assert result.exit_code == 0, result.output
        descriptor = yaml.safe_load(result.output)
        assert [(f["name"], f["type"]) for f in descriptor["fields"]] == [
            ("id", "integer"),
            ("name", "string"),
            ("score", "number"),
        ]

    def test_prints_json(self, runner, people_csv):
        result = runner.invoke(main, ["infer", str(people_csv), "--json", "--sample-size", "1"])
        assert result.exit_code == 0, result.output
        descriptor = json.loads(result.output)
        assert descriptor["fields"][2]["type"] == "number"

    def test_writes_output_file(self, runner, people_csv, tmp_path):
        target = tmp_path / "inferred.yaml"
        result = runner.invoke(main, ["infer", str(people_csv), "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert "✓" in result.output
        assert yaml.safe_load(target.read_text())["fields"][0]["name"] == "id"

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["infer", str(tmp_path / "nope.csv")])
        assert result.exit_code == 1
        assert "Inference failed" in result.output

    def test_rejects_bad_confidence(self, runner, people_csv):
        result = runner.invoke(main, ["infer", str(people_csv), "--confidence", "0"])
        assert result.exit_code != 0


class TestValidateCommand:
    """Tests for `tablecast validate`."""

    def test_valid_file(self, runner, people_csv, schema_file):
        result = runner.invoke(main, ["validate", str(people_csv), "--schema", str(schema_file)])
        assert result.exit_code == 0, result.output
        assert "3 rows valid" in result.output

    def test_invalid_file(self, runner, write_csv, schema_file):
        path = write_csv("bad.csv", "id,name,score\r\nx,A,1\r\n1,B,101\r\n1,C,5\r\n")
        result = runner.invoke(main, ["validate", str(path), "--schema", str(schema_file)])
        assert result.exit_code == 1
        assert "row 1: [cast_error]" in result.output
        assert "row 2: [constraint_violation]" in result.output
        assert "row 3: [constraint_violation]" in result.output
        assert "3 errors in 3 of 3 rows" in result.output

    def test_fail_fast(self, runner, write_csv, schema_file):
        path = write_csv("bad.csv", "id,name,score\r\nx,A,1\r\ny,B,2\r\n")
        result = runner.invoke(
            main, ["validate", str(path), "--schema", str(schema_file), "--fail-fast"]
        )
        assert result.exit_code == 1
        assert "stopped early" in result.output
        assert "row 2" not in result.output

    def test_lenient_header(self, runner, write_csv, schema_file):
        path = write_csv("partial.csv", "id,name,extra\r\n1,A,z\r\n")
        strict = runner.invoke(main, ["validate", str(path), "--schema", str(schema_file)])
        assert strict.exit_code == 1
        lenient = runner.invoke(
            main, ["validate", str(path), "--schema", str(schema_file), "--lenient"]
        )
        assert lenient.exit_code == 0, lenient.output
        assert "warning: missing column 'score'" in lenient.output

    def test_bad_schema(self, runner, people_csv, tmp_path):
        schema = tmp_path / "bad.yaml"
        schema.write_text("fields:\n  - name: a\n    type: money\n")
        result = runner.invoke(main, ["validate", str(people_csv), "--schema", str(schema)])
        assert result.exit_code == 1
        assert "Validation failed" in result.output


class TestReorderCommand:
    """Tests for `tablecast reorder`."""

    def test_reorders(self, runner, write_csv, tmp_path):
        path = write_csv("in.csv", "b,a,c\r\n1,2,3\r\n")
        out = tmp_path / "out.csv"
        result = runner.invoke(main, ["reorder", str(path), str(out), "--header", "a,b,c"])
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == b"a,b,c\r\n2,1,3\r\n"

    def test_lf(self, runner, write_csv, tmp_path):
        path = write_csv("in.csv", "b,a\r\n1,2\r\n")
        out = tmp_path / "out.csv"
        result = runner.invoke(main, ["reorder", str(path), str(out), "--header", "a, b", "--lf"])
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == b"a,b\n2,1\n"

    def test_missing_column_fails(self, runner, write_csv, tmp_path):
        path = write_csv("in.csv", "b,a,c\r\n1,2,3\r\n")
        out = tmp_path / "out.csv"
        result = runner.invoke(main, ["reorder", str(path), str(out), "--header", "a,b"])
        assert result.exit_code == 1
        assert "Reorder failed" in result.output
        assert not out.exists()

    def test_lenient_drops_columns(self, runner, write_csv, tmp_path):
        path = write_csv("in.csv", "b,a,c\r\n1,2,3\r\n")
        out = tmp_path / "out.csv"
        result = runner.invoke(
            main, ["reorder", str(path), str(out), "--header", "a,b", "--lenient"]
        )
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == b"a,b\r\n2,1\r\n"

    def test_output_outside_input_directory(self, runner, write_csv, tmp_path):
        path = write_csv("sub/in.csv", "a\r\n1\r\n")
        result = runner.invoke(
            main, ["reorder", str(path), str(tmp_path / "out.csv"), "--header", "a"]
        )
        assert result.exit_code == 1


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
