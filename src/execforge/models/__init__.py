"""Pydantic models for execforge."""

from execforge.models.buckets import (
    AggregationType,
    Buckets,
    Category,
    CategoryType,
    DateFilter,
    Filter,
    ListAttributeFilter,
    Measure,
    MeasureType,
    SortDirection,
    VisualizationObject,
)
from execforge.models.execution import (
    DataResult,
    ExecutionConfiguration,
    Header,
    MetricDefinition,
    OrderBy,
)

__all__ = [
    "AggregationType",
    "Buckets",
    "Category",
    "CategoryType",
    "DataResult",
    "DateFilter",
    "ExecutionConfiguration",
    "Filter",
    "Header",
    "ListAttributeFilter",
    "Measure",
    "MeasureType",
    "MetricDefinition",
    "OrderBy",
    "SortDirection",
    "VisualizationObject",
]
