"""Unit tests for TabularDataSource reading and writing."""

import io
from decimal import Decimal

import pytest

from tablecast.connectors.source import OriginKind, TabularDataSource, column_mapping
from tablecast.core.exceptions import ConnectorError, SecurityError, StructuralError
from tablecast.core.schema import Schema
from tablecast.models.dialect import CSVDialect
from tablecast.models.validation_config import HeaderPolicy


class TestReading:
    """Tests for header discovery and row iteration."""

    def test_header_and_rows(self, people_csv):
        source = TabularDataSource.from_path(people_csv)
        assert source.kind == OriginKind.PATH
        assert source.header == ["id", "name", "score"]
        assert source.data() == [
            ["1", "Alice", "95.5"],
            ["2", "Bob", "87"],
            ["3", "Charlie", "92.25"],
        ]

    def test_rows_are_restartable(self, people_csv):
        source = TabularDataSource.from_path(people_csv)
        assert list(source.rows()) == list(source.rows())
        assert len(list(source)) == 3

    def test_early_close_releases_the_handle(self, people_csv):
        source = TabularDataSource.from_path(people_csv)
        rows = source.rows()
        assert next(rows) == ["1", "Alice", "95.5"]
        rows.close()
        assert len(source.data()) == 3

    def test_quoted_cells(self):
        text = 'a,b\r\n"x, y","say ""hi"""\r\n"multi\nline",z\r\n'
        source = TabularDataSource.from_text(text)
        assert source.data() == [["x, y", 'say "hi"'], ["multi\nline", "z"]]

    def test_blank_lines_skipped(self):
        source = TabularDataSource.from_text("a\r\n1\r\n\r\n2\r\n")
        assert source.data() == [["1"], ["2"]]

    def test_empty_source(self):
        source = TabularDataSource.from_text("")
        assert source.header == []
        assert source.data() == []

    def test_headerless_source(self):
        source = TabularDataSource.from_text("1,2\r\n3,4\r\n", dialect=CSVDialect(has_header=False))
        assert source.header == ["col_0", "col_1"]
        assert source.data() == [["1", "2"], ["3", "4"]]

    def test_headerless_with_declared_names(self):
        source = TabularDataSource.from_text(
            "1,2\r\n", dialect=CSVDialect(has_header=False), header=["a", "b"]
        )
        assert source.column_names == ["a", "b"]

    def test_declared_header_overrides(self, people_csv):
        source = TabularDataSource.from_path(people_csv)
        source.set_header(["name", "id", "score"])
        assert source.header == ["name", "id", "score"]
        assert source.data_header == ["id", "name", "score"]
        source.set_header(None)
        assert source.header == ["id", "name", "score"]

    def test_custom_delimiter(self):
        source = TabularDataSource.from_text("a;b\n1;2\n", dialect=CSVDialect(delimiter=";"))
        assert source.header == ["a", "b"]
        assert source.data() == [["1", "2"]]

    def test_missing_file(self, tmp_path):
        source = TabularDataSource.from_path(tmp_path / "nope.csv")
        with pytest.raises(ConnectorError):
            source.data()

    def test_path_outside_working_root(self, tmp_path, people_csv):
        root = tmp_path / "jail"
        root.mkdir()
        source = TabularDataSource.from_path("../people.csv", working_root=root)
        with pytest.raises(SecurityError):
            source.data()

    def test_relative_path_under_working_root(self, tmp_path, write_csv):
        write_csv("sub/t.csv", "a\r\n1\r\n")
        source = TabularDataSource.from_path("sub/t.csv", working_root=tmp_path)
        assert source.data() == [["1"]]

    def test_malformed_csv(self):
        source = TabularDataSource.from_text('a,b\r\n"unterminated,1\r\n')
        with pytest.raises(ConnectorError, match="parse"):
            source.data()


class TestArchive:
    """Tests for reading entries of zip archives."""

    def test_from_archive(self, people_zip):
        source = TabularDataSource.from_archive(people_zip, "data/people.csv")
        assert source.kind == OriginKind.ARCHIVE
        assert source.header == ["id", "name"]
        assert source.data() == [["1", "Alice"], ["2", "Bob"]]

    def test_zip_working_root_switches_to_archive(self, people_zip):
        source = TabularDataSource.from_path("data\\people.csv", working_root=people_zip)
        assert source.kind == OriginKind.ARCHIVE
        assert source.data() == [["1", "Alice"], ["2", "Bob"]]

    def test_escaping_entry_rejected(self, people_zip):
        with pytest.raises(SecurityError):
            TabularDataSource.from_archive(people_zip, "../people.csv")

    def test_missing_entry(self, people_zip):
        source = TabularDataSource.from_archive(people_zip, "data/other.csv")
        with pytest.raises(ConnectorError):
            source.data()


class TestColumnMapping:
    """Tests for the column permutation used on write."""

    def test_permutation(self):
        assert column_mapping(["b", "a", "c"], ["a", "b", "c"]) == [1, 0, 2]

    def test_strict_mismatch(self):
        with pytest.raises(StructuralError) as exc_info:
            column_mapping(["b", "a", "c"], ["a", "b"])
        assert exc_info.value.context["missing"] == ["c"]

    def test_strict_extra(self):
        with pytest.raises(StructuralError):
            column_mapping(["a"], ["a", "z"])

    def test_lenient(self):
        assert column_mapping(["b", "a", "c"], ["a", "b", "z"], HeaderPolicy.LENIENT) == [
            1,
            0,
            None,
        ]

    def test_duplicates_rejected(self):
        with pytest.raises(StructuralError, match="Duplicate"):
            column_mapping(["a", "a"], ["a"], HeaderPolicy.LENIENT)


class TestWriting:
    """Tests for TabularDataSource.write."""

    def test_reorders_columns(self, write_csv):
        path = write_csv("in.csv", "b,a,c\r\nvb,va,vc\r\n")
        source = TabularDataSource.from_path(path)
        out = io.StringIO()
        count = source.write(out, output_header=["a", "b", "c"])
        assert count == 1
        assert out.getvalue() == "a,b,c\r\nva,vb,vc\r\n"

    def test_missing_column_fails_before_writing(self, write_csv, tmp_path):
        path = write_csv("in.csv", "b,a,c\r\nvb,va,vc\r\n")
        source = TabularDataSource.from_path(path)
        with pytest.raises(StructuralError):
            source.write(tmp_path / "out.csv", output_header=["a", "b"])
        assert not (tmp_path / "out.csv").exists()

    def test_lenient_fills_and_drops(self, write_csv):
        path = write_csv("in.csv", "b,a,c\r\nvb,va,vc\r\n")
        source = TabularDataSource.from_path(path)
        out = io.StringIO()
        source.write(out, output_header=["a", "z"], policy=HeaderPolicy.LENIENT)
        assert out.getvalue() == "a,z\r\nva,\r\n"

    def test_declared_header_is_default_output(self, write_csv):
        path = write_csv("in.csv", "b,a\r\n1,2\r\n")
        source = TabularDataSource.from_path(path, header=["a", "b"])
        out = io.StringIO()
        source.write(out)
        assert out.getvalue() == "a,b\r\n2,1\r\n"

    def test_lf_and_quoting(self):
        source = TabularDataSource.from_text("a,b\r\n\"x,y\",plain\r\n")
        out = io.StringIO()
        source.write(out, dialect=CSVDialect(line_terminator="\n"))
        assert out.getvalue() == 'a,b\n"x,y",plain\n'

    def test_explicit_rows_with_schema(self):
        schema = Schema.from_descriptor(
            {
                "fields": [
                    {"name": "id", "type": "integer"},
                    {"name": "flag", "type": "boolean", "trueValues": ["Y"], "falseValues": ["N"]},
                    {"name": "amount", "type": "number"},
                ]
            }
        )
        source = TabularDataSource.from_text("id,flag,amount\r\n")
        out = io.StringIO()
        source.write(
            out,
            output_header=["amount", "id", "flag"],
            rows=[[1, True, Decimal("2.50")], [2, False, None]],
            schema=schema,
        )
        assert out.getvalue() == "amount,id,flag\r\n2.50,1,Y\r\n,2,N\r\n"

    def test_schema_header_names(self):
        schema = Schema(
            fields=[
                Schema.from_descriptor({"fields": [{"name": "id", "type": "integer"}]})
                .fields[0]
                .with_header_name("ID"),
            ]
        )
        source = TabularDataSource.from_text("id\r\n5\r\n")
        out = io.StringIO()
        source.write(out, schema=schema)
        assert out.getvalue() == "ID\r\n5\r\n"

    def test_row_width_mismatch(self):
        source = TabularDataSource.from_text("a,b\r\n")
        with pytest.raises(StructuralError):
            source.write(io.StringIO(), rows=[["1"]])

    def test_write_path_under_root(self, write_csv, tmp_path):
        path = write_csv("in.csv", "a\r\n1\r\n")
        source = TabularDataSource.from_path(path)
        assert source.write("nested/out.csv") == 1
        assert (tmp_path / "nested" / "out.csv").read_bytes() == b"a\r\n1\r\n"

    def test_write_outside_root_rejected(self, write_csv, tmp_path):
        path = write_csv("sub/in.csv", "a\r\n1\r\n")
        source = TabularDataSource.from_path(path)
        with pytest.raises(SecurityError):
            source.write(tmp_path / "escape.csv")

    def test_rewrite_in_place(self, write_csv, tmp_path):
        path = write_csv("in.csv", "b,a\r\n1,2\r\n3,4\r\n")
        source = TabularDataSource.from_path(path)
        assert source.write(path, ["a", "b"]) == 2
        assert path.read_bytes() == b"a,b\r\n2,1\r\n4,3\r\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["in.csv"]

    def test_failed_write_leaves_no_partial_output(self, write_csv, tmp_path):
        path = write_csv("in.csv", "a,b\r\n1,2\r\n")
        source = TabularDataSource.from_path(path)
        with pytest.raises(StructuralError):
            source.write("out.csv", ["b", "a"], rows=[["1", "2"], ["3"]])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["in.csv"]

    def test_failed_write_keeps_existing_target(self, write_csv, tmp_path):
        path = write_csv("in.csv", "a,b\r\n1,2\r\n")
        existing = write_csv("out.csv", "old\r\n")
        source = TabularDataSource.from_path(path)
        with pytest.raises(StructuralError):
            source.write(existing, rows=[["1", "2"], ["3"]])
        assert existing.read_bytes() == b"old\r\n"
