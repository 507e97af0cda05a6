"""Schema inference from a sample of raw rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from tablecast.core.exceptions import CastError, TableCastError
from tablecast.core.fields import FIELD_TYPES, BaseField, StringField
from tablecast.core.schema.models import Schema
from tablecast.models.validation_config import InferenceConfig

if TYPE_CHECKING:
    from tablecast.connectors.source import TabularDataSource

logger = logging.getLogger(__name__)

# Most specific first; string always matches and closes the list.
DEFAULT_PRIORITY: tuple[str, ...] = (
    "integer",
    "number",
    "boolean",
    "date",
    "time",
    "datetime",
    "array",
    "object",
    "string",
)


@dataclass
class InferenceResult:
    schema: Schema
    sample_size: int
    rows_sampled: int
    # Share of non-empty sampled values the winning type cast, per column.
    confidence: dict[str, float] = field(default_factory=dict)


class TypeInferrer:
    """Pick the most specific field type for each column of a sample.

    A column gets the first candidate, in priority order, whose share of
    successfully cast non-empty sample values reaches ``confidence``. Empty
    columns and columns nothing else fits become strings. Inference never
    raises on bad data.
    """

    def __init__(
        self,
        sample_size: int = 100,
        confidence: float = 1.0,
        candidates: Sequence[str] = DEFAULT_PRIORITY,
        missing_values: Sequence[str] = ("",),
    ) -> None:
        config = InferenceConfig(sample_size=sample_size, confidence=confidence)
        self.sample_size = config.sample_size
        self.confidence = config.confidence
        self.candidates = [name for name in candidates if name != "string"]
        self.missing_values = list(missing_values)

    @classmethod
    def from_config(cls, config: InferenceConfig) -> TypeInferrer:
        return cls(sample_size=config.sample_size, confidence=config.confidence)

    def infer(
        self, header: Sequence[str], rows: Iterable[Sequence[str]]
    ) -> InferenceResult:
        """Infer a schema for ``header`` from at most ``sample_size`` of ``rows``."""
        names = self._normalize_header(header)
        sample = list(islice(rows, self.sample_size))

        fields: list[BaseField] = []
        confidence: dict[str, float] = {}
        for index, name in enumerate(names):
            values = [
                row[index]
                for row in sample
                if index < len(row) and row[index] not in self.missing_values
            ]
            inferred, ratio = self._infer_column(name, values)
            fields.append(inferred)
            confidence[name] = ratio

        schema = Schema(fields=fields, missing_values=self.missing_values)
        logger.debug(
            "Inferred schema",
            extra={"context": {"columns": len(fields), "rows_sampled": len(sample)}},
        )
        return InferenceResult(
            schema=schema,
            sample_size=self.sample_size,
            rows_sampled=len(sample),
            confidence=confidence,
        )

    def infer_source(self, source: TabularDataSource) -> InferenceResult:
        """Infer a schema from the first ``sample_size`` rows of ``source``."""
        rows = source.rows()
        try:
            return self.infer(source.column_names, rows)
        finally:
            rows.close()

    def _infer_column(self, name: str, values: list[str]) -> tuple[BaseField, float]:
        if not values:
            return StringField(name=name), 1.0

        for type_name in self.candidates:
            try:
                candidate = FIELD_TYPES[type_name](name=name)
            except (KeyError, ValueError, TableCastError):
                continue
            ratio = self._cast_ratio(candidate, values)
            if ratio >= self.confidence:
                return candidate, ratio
        return StringField(name=name), 1.0

    @staticmethod
    def _cast_ratio(candidate: BaseField, values: list[str]) -> float:
        cast = 0
        for value in values:
            try:
                candidate.parse(value)
            except CastError:
                continue
            cast += 1
        return cast / len(values)

    @staticmethod
    def _normalize_header(header: Sequence[str]) -> list[str]:
        names: list[str] = []
        seen: set[str] = set()
        for index, raw in enumerate(header, start=1):
            name = raw if isinstance(raw, str) else ""
            if not name.strip():
                name = f"field{index}"
            base, suffix = name, 2
            while name in seen:
                name = f"{base}_{suffix}"
                suffix += 1
            if name != raw:
                logger.warning(
                    "Renamed header column",
                    extra={"context": {"column": index, "from": raw, "to": name}},
                )
            seen.add(name)
            names.append(name)
        return names
