"""Tabular data source: raw rows from a file, archive entry, URL or text.

Row tokenizing and escaping is delegated to the ``csv`` module and storage
access to fsspec. This module owns header discovery, path containment and
column reordering on write.
"""

from __future__ import annotations

import csv
import io
import logging
import os
import uuid
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional, Sequence, TextIO, Union

import fsspec

from tablecast.connectors.paths import PathLike, PathResolver
from tablecast.core.exceptions import ConnectorError, StructuralError
from tablecast.models.dialect import CSVDialect
from tablecast.models.validation_config import HeaderPolicy

if TYPE_CHECKING:
    from tablecast.core.schema.models import Schema

logger = logging.getLogger(__name__)


class OriginKind(str, Enum):
    PATH = "path"
    ARCHIVE = "archive"
    URL = "url"
    TEXT = "text"


def _discard(fs: Any, path: Path) -> None:
    if fs.exists(str(path)):
        fs.rm(str(path))


def column_mapping(
    data_header: Sequence[str],
    output_header: Sequence[str],
    policy: HeaderPolicy = HeaderPolicy.STRICT,
) -> list[Optional[int]]:
    """Map each data column position to its position in ``output_header``.

    Names are matched exactly. Under the strict policy every data column must
    appear exactly once in the output header and the output header may name
    nothing else. Under the lenient policy data columns absent from the output
    are dropped (mapped to None) and output-only columns stay empty.

    Raises:
        StructuralError: If either header repeats a name, or on any mismatch
            under the strict policy.
    """
    for label, names in (("data", data_header), ("output", output_header)):
        duplicates = sorted({name for name in names if list(names).count(name) > 1})
        if duplicates:
            raise StructuralError(
                f"Duplicate column names in {label} header",
                context={"duplicates": duplicates},
            )

    positions = {name: index for index, name in enumerate(output_header)}
    missing = [name for name in data_header if name not in positions]
    extra = [name for name in output_header if name not in set(data_header)]

    if missing or extra:
        if policy == HeaderPolicy.STRICT:
            raise StructuralError(
                "Output header does not match the data columns",
                context={"missing": missing, "extra": extra},
            )
        logger.warning(
            "Output header does not match the data columns",
            extra={"context": {"dropped": missing, "empty": extra}},
        )

    return [positions.get(name) for name in data_header]


class TabularDataSource:
    """Raw rows and header of one table.

    Iteration is lazy and restartable: each call to :meth:`rows` reopens the
    origin, and the handle is closed when the iterator is exhausted, closed or
    abandoned on an error. A single iterator must not be shared between
    concurrent consumers.
    """

    def __init__(
        self,
        origin: str,
        kind: OriginKind,
        working_root: Optional[PathLike] = None,
        archive: Optional[PathLike] = None,
        dialect: Optional[CSVDialect] = None,
        header: Optional[Sequence[str]] = None,
    ):
        self.origin = origin
        self.kind = kind
        self.archive = Path(archive) if archive is not None else None
        self.dialect = dialect or CSVDialect()
        self._resolver = PathResolver(working_root if working_root is not None else Path.cwd())
        self._declared_header = list(header) if header is not None else None
        self._data_header: Optional[list[str]] = None

    # ========== Constructors ==========

    @classmethod
    def from_path(
        cls,
        path: PathLike,
        working_root: Optional[PathLike] = None,
        dialect: Optional[CSVDialect] = None,
        header: Optional[Sequence[str]] = None,
    ) -> TabularDataSource:
        """Read a file, contained in ``working_root``.

        Without a working root the file's own directory is used. A working
        root ending in ``.zip`` makes ``path`` an entry inside that archive.
        """
        if working_root is not None and os.fspath(working_root).lower().endswith(".zip"):
            return cls.from_archive(working_root, os.fspath(path), dialect=dialect, header=header)
        if working_root is None:
            path = Path(path).absolute()
            working_root = path.parent
        return cls(
            os.fspath(path),
            OriginKind.PATH,
            working_root=working_root,
            dialect=dialect,
            header=header,
        )

    @classmethod
    def from_archive(
        cls,
        archive: PathLike,
        member: str,
        dialect: Optional[CSVDialect] = None,
        header: Optional[Sequence[str]] = None,
    ) -> TabularDataSource:
        """Read one entry of a zip archive; writes go next to the archive."""
        PathResolver.resolve_member(member)
        return cls(
            member,
            OriginKind.ARCHIVE,
            working_root=Path(archive).absolute().parent,
            archive=archive,
            dialect=dialect,
            header=header,
        )

    @classmethod
    def from_url(
        cls,
        url: str,
        working_root: Optional[PathLike] = None,
        dialect: Optional[CSVDialect] = None,
        header: Optional[Sequence[str]] = None,
    ) -> TabularDataSource:
        return cls(url, OriginKind.URL, working_root=working_root, dialect=dialect, header=header)

    @classmethod
    def from_text(
        cls,
        text: str,
        working_root: Optional[PathLike] = None,
        dialect: Optional[CSVDialect] = None,
        header: Optional[Sequence[str]] = None,
    ) -> TabularDataSource:
        """Read inline CSV text."""
        return cls(text, OriginKind.TEXT, working_root=working_root, dialect=dialect, header=header)

    # ========== Reading ==========

    @property
    def working_root(self) -> Path:
        return self._resolver.root

    @contextmanager
    def open(self) -> Iterator[TextIO]:
        """Open the origin as a text stream for exactly one read.

        Raises:
            SecurityError: If a path or archive entry escapes its root.
            ConnectorError: If the origin cannot be opened.
        """
        if self.kind == OriginKind.TEXT:
            yield io.StringIO(self.origin, newline="")
            return

        encoding = self.dialect.encoding
        try:
            if self.kind == OriginKind.PATH:
                resolved = self._resolver.resolve(self.origin)
                fs = fsspec.filesystem("file")
                with fs.open(str(resolved), mode="r", encoding=encoding, newline="") as f:
                    yield f
            elif self.kind == OriginKind.ARCHIVE:
                member = PathResolver.resolve_member(self.origin)
                fs = fsspec.filesystem("zip", fo=str(self.archive), skip_instance_cache=True)
                try:
                    with fs.open(member, mode="r", encoding=encoding, newline="") as f:
                        yield f
                finally:
                    fs.close()
            else:
                with fsspec.open(self.origin, mode="r", encoding=encoding, newline="") as f:
                    yield f
        except OSError as e:
            raise ConnectorError(
                f"Failed to open data source: {e}",
                context={"origin": self.describe(), "kind": self.kind.value},
            ) from e

    def _reader(self, stream: TextIO) -> Iterator[list[str]]:
        reader = csv.reader(stream, **self.dialect.reader_kwargs())
        try:
            for row in reader:
                # Blank lines carry no cells and are skipped.
                if row:
                    yield row
        except (csv.Error, UnicodeDecodeError) as e:
            raise ConnectorError(
                f"Failed to parse data source: {e}",
                context={"origin": self.describe(), "line": reader.line_num},
            ) from e

    @property
    def data_header(self) -> list[str]:
        """The natural column order of the data, discovered once."""
        if self._data_header is None:
            with self.open() as stream:
                first = next(self._reader(stream), None)
            if first is None:
                self._data_header = []
            elif self.dialect.has_header:
                self._data_header = list(first)
            else:
                self._data_header = [f"col_{i}" for i in range(len(first))]
        return list(self._data_header)

    @property
    def header(self) -> list[str]:
        """The declared header if one was set, else the data header."""
        if self._declared_header is not None:
            return list(self._declared_header)
        return self.data_header

    @property
    def column_names(self) -> list[str]:
        """Names of the cells of each row, in the order they appear.

        Headerless data is labelled by the declared header when one was set.
        Otherwise this is the data header; a declared header then only
        chooses the output order.
        """
        if not self.dialect.has_header and self._declared_header is not None:
            return list(self._declared_header)
        return self.data_header

    def set_header(self, names: Optional[Sequence[str]]) -> None:
        """Declare the header used for output; None reverts to the data header."""
        self._declared_header = list(names) if names is not None else None

    def rows(self) -> Iterator[list[str]]:
        """Yield raw data rows lazily, header row excluded."""
        with self.open() as stream:
            reader = self._reader(stream)
            if self.dialect.has_header:
                first = next(reader, None)
                if first is not None and self._data_header is None:
                    self._data_header = list(first)
            yield from reader

    def __iter__(self) -> Iterator[list[str]]:
        return self.rows()

    def data(self) -> list[list[str]]:
        """Return every raw row.

        This reads the entire origin into memory before returning; use
        :meth:`rows` to stream instead.
        """
        return list(self.rows())

    # ========== Writing ==========

    def write(
        self,
        target: Union[PathLike, TextIO],
        output_header: Optional[Sequence[str]] = None,
        rows: Optional[Iterable[Sequence[Any]]] = None,
        dialect: Optional[CSVDialect] = None,
        schema: Optional[Schema] = None,
        policy: HeaderPolicy = HeaderPolicy.STRICT,
    ) -> int:
        """Write rows as CSV with columns in ``output_header`` order.

        ``rows`` default to this source's own rows and are given in the
        order of :attr:`column_names`. With a ``schema``, typed values are
        rendered through each field's ``format_value`` and columns take the
        fields' output names. The column mapping is checked before anything is
        written.

        Returns:
            Number of data rows written.

        Raises:
            StructuralError: If the columns cannot be mapped, or a row's
                width differs from the data header.
            SecurityError: If a target path escapes the working root.
            ConnectorError: If the target cannot be written.
        """
        data_header = self.column_names
        formatters: list[Any] = [None] * len(data_header)
        names = list(data_header)
        if schema is not None:
            for index, name in enumerate(data_header):
                field = schema.get_field(name)
                if field is not None:
                    formatters[index] = field.format_value
                    names[index] = field.output_name

        if output_header is None:
            if schema is not None:
                output_header = [name for name in schema.output_header if name in names]
            else:
                output_header = self.header
        output_header = list(output_header)
        mapping = column_mapping(names, output_header, policy)
        dialect = dialect or self.dialect

        if isinstance(target, (str, os.PathLike)):
            resolved = self._resolver.resolve(target)
            fs = fsspec.filesystem("file")
            # Rows stream into a sibling file that replaces the target only
            # once every row is written, so the target may also be the origin.
            staging = resolved.with_name(f".{resolved.name}.{uuid.uuid4().hex}.tmp")
            try:
                fs.makedirs(str(resolved.parent), exist_ok=True)
                with fs.open(str(staging), mode="w", encoding=dialect.encoding, newline="") as out:
                    count = self._write_rows(out, output_header, mapping, formatters, rows, dialect)
                os.replace(staging, resolved)
            except OSError as e:
                _discard(fs, staging)
                raise ConnectorError(
                    f"Failed to write file: {e}", context={"path": str(resolved)}
                ) from e
            except BaseException:
                _discard(fs, staging)
                raise
            return count
        return self._write_rows(target, output_header, mapping, formatters, rows, dialect)

    def _write_rows(
        self,
        out: TextIO,
        output_header: list[str],
        mapping: list[Optional[int]],
        formatters: list[Any],
        rows: Optional[Iterable[Sequence[Any]]],
        dialect: CSVDialect,
    ) -> int:
        writer = csv.writer(out, **dialect.writer_kwargs())
        if dialect.has_header:
            writer.writerow(output_header)

        source_rows = self.rows() if rows is None else rows
        count = 0
        for row in source_rows:
            if len(row) != len(mapping):
                raise StructuralError(
                    "Row width does not match the data header",
                    context={"row": count + 1, "cells": len(row), "header": len(mapping)},
                )
            ordered = [""] * len(output_header)
            for index, value in enumerate(row):
                position = mapping[index]
                if position is None:
                    continue
                formatter = formatters[index]
                # Raw text is written as read; only typed values are rendered.
                if formatter is not None and not isinstance(value, str):
                    ordered[position] = formatter(value)
                else:
                    ordered[position] = "" if value is None else value
            writer.writerow(ordered)
            count += 1

        logger.debug(
            "Wrote rows",
            extra={"context": {"rows": count, "columns": len(output_header)}},
        )
        return count

    def describe(self) -> str:
        if self.kind == OriginKind.TEXT:
            return "<text>"
        if self.kind == OriginKind.ARCHIVE:
            return f"{self.archive}!{self.origin}"
        return self.origin

    def __repr__(self) -> str:
        return f"TabularDataSource(kind={self.kind.value!r}, origin={self.describe()!r})"
