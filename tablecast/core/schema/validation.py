"""Batch validation of a tabular source against a schema."""

from __future__ import annotations

import logging
from contextlib import closing
from typing import TYPE_CHECKING, Any, Iterator, List, Optional

import pyarrow as pa

from tablecast.core.exceptions import StructuralError, ValidationError
from tablecast.core.results import ErrorKind, ValidationIssue, ValidationReport
from tablecast.core.schema.models import HeaderCheck, Schema
from tablecast.models.validation_config import HeaderPolicy, ValidationConfig

if TYPE_CHECKING:
    from tablecast.connectors.source import TabularDataSource

logger = logging.getLogger(__name__)


class SchemaValidator:
    """Check every row of a source against a schema in one pass.

    Each call to :meth:`validate`, :meth:`iter_typed_rows` or
    :meth:`read_arrow` opens its own validation session, so uniqueness is
    tracked per pass and a validator can be reused.
    """

    def __init__(
        self,
        schema: Schema,
        fail_fast: bool = False,
        header_policy: HeaderPolicy = HeaderPolicy.STRICT,
        max_issues: Optional[int] = None,
    ) -> None:
        config = ValidationConfig(
            fail_fast=fail_fast, header_policy=header_policy, max_issues=max_issues
        )
        self.schema = schema
        self.fail_fast = config.fail_fast
        self.header_policy = config.header_policy
        self.max_issues = config.max_issues

    @classmethod
    def from_config(cls, schema: Schema, config: ValidationConfig) -> SchemaValidator:
        return cls(
            schema,
            fail_fast=config.fail_fast,
            header_policy=config.header_policy,
            max_issues=config.max_issues,
        )

    def header_issues(self, header: List[str]) -> tuple[HeaderCheck, List[ValidationIssue]]:
        """Compare a raw header with the schema's fields.

        Duplicate columns are always errors. Missing and extra columns are
        errors under the strict policy and warnings under the lenient one.
        """
        check = self.schema.validate_header(header)
        level = "error" if self.header_policy == HeaderPolicy.STRICT else "warning"

        issues: List[ValidationIssue] = []
        for name in check.duplicates:
            issues.append(
                ValidationIssue(
                    level="error",
                    kind=ErrorKind.STRUCTURE,
                    message=f"duplicate column '{name}'",
                    field=name,
                )
            )
        for name in check.missing:
            issues.append(
                ValidationIssue(
                    level=level,
                    kind=ErrorKind.STRUCTURE,
                    message=f"missing column '{name}'",
                    field=name,
                )
            )
        for name in check.extra:
            issues.append(
                ValidationIssue(
                    level=level,
                    kind=ErrorKind.STRUCTURE,
                    message=f"unexpected column '{name}'",
                    field=name,
                )
            )
        return check, issues

    def validate(self, source: TabularDataSource) -> ValidationReport:
        """Validate ``source`` and collect every issue found.

        The whole table is scanned unless ``fail_fast`` is set or
        ``max_issues`` errors have been collected; the report is then marked
        ``truncated``.
        """
        report = ValidationReport()
        header = source.column_names
        _, header_issues = self.header_issues(header)
        for issue in header_issues:
            if issue.level == "error":
                report.errors.append(issue)
            else:
                report.warnings.append(issue)

        if report.errors and self.fail_fast:
            report.truncated = True
            return report

        session = self.schema.open_session()
        with closing(source.rows()) as rows:
            for row_number, raw_row in enumerate(rows, start=1):
                result = self.schema.cast_row(raw_row, header, session, row_number)
                report.row_count += 1
                if result.ok:
                    continue

                report.invalid_row_count += 1
                failures = list(result.failures())
                logger.debug(
                    "Row failed validation",
                    extra={"row_number": row_number, "context": {"issues": len(failures)}},
                )
                for failure in failures:
                    report.errors.append(ValidationIssue.from_failure(failure, row_number))
                if self._should_stop(report):
                    report.truncated = True
                    break

        logger.info(
            "Validation finished",
            extra={
                "context": {
                    "rows": report.row_count,
                    "invalid_rows": report.invalid_row_count,
                    "errors": len(report.errors),
                    "warnings": len(report.warnings),
                }
            },
        )
        return report

    def _should_stop(self, report: ValidationReport) -> bool:
        if self.fail_fast:
            return True
        return self.max_issues is not None and len(report.errors) >= self.max_issues

    def iter_typed_rows(self, source: TabularDataSource) -> Iterator[List[Any]]:
        """Yield each row's typed values in schema field order.

        Raises:
            StructuralError: If the header does not match under the strict
                policy, or repeats a column.
            ValidationError: On the first row that fails to validate.
        """
        header = source.column_names
        check, issues = self.header_issues(header)
        errors = [issue for issue in issues if issue.level == "error"]
        if errors:
            raise StructuralError(
                "Header does not match the schema",
                context={
                    "missing": check.missing,
                    "extra": check.extra,
                    "duplicates": check.duplicates,
                },
            )
        for issue in issues:
            logger.warning(issue.message, extra={"context": {"field": issue.field}})

        session = self.schema.open_session()
        with closing(source.rows()) as rows:
            for row_number, raw_row in enumerate(rows, start=1):
                result = self.schema.cast_row(raw_row, header, session, row_number)
                if not result.ok:
                    row_issues = [
                        ValidationIssue.from_failure(failure, row_number)
                        for failure in result.failures()
                    ]
                    raise ValidationError(
                        f"Row {row_number} failed validation: {row_issues[0].message}",
                        context={"row": row_number, "issues": len(row_issues)},
                        issues=row_issues,
                    )
                yield result.values

    def read_arrow(self, source: TabularDataSource) -> pa.Table:
        """Load the whole source into a typed :class:`pyarrow.Table`.

        This materializes every row in memory.

        Raises:
            StructuralError: See :meth:`iter_typed_rows`.
            ValidationError: See :meth:`iter_typed_rows`.
        """
        fields = self.schema.fields
        columns: List[List[Any]] = [[] for _ in fields]
        for values in self.iter_typed_rows(source):
            for column, field, value in zip(columns, fields, values):
                column.append(field.to_arrow(value))

        arrow_schema = self.schema.to_arrow_schema()
        arrays = [
            pa.array(column, type=arrow_field.type)
            for column, arrow_field in zip(columns, arrow_schema)
        ]
        return pa.Table.from_arrays(arrays, schema=arrow_schema)
