"""Tabular data sources and path containment."""

from tablecast.connectors.paths import PathResolver
from tablecast.connectors.source import OriginKind, TabularDataSource, column_mapping

__all__ = [
    "OriginKind",
    "PathResolver",
    "TabularDataSource",
    "column_mapping",
]
