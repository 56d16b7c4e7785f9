"""Pydantic models for visualization bucket descriptions.

a visualization object is the declarative description of a report - which
measures, which categories (attributes to slice by) and which filters. the
platform nests every bucket item in a wrapper object (`{"measure": {...}}`)
so the validators below unwrap those before pydantic sees the fields.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MeasureType(str, Enum):
    """What kind of platform object a measure points at."""

    FACT = "fact"
    ATTRIBUTE = "attribute"
    METRIC = "metric"  # an existing metric, no aggregation needed


class CategoryType(str, Enum):
    """Category types. date categories drive period-over-period comparisons."""

    ATTRIBUTE = "attribute"
    DATE = "date"


class AggregationType(str, Enum):
    """Aggregations the query language understands for facts and attributes."""

    SUM = "sum"
    COUNT = "count"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    MEDIAN = "median"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class _WireModel(BaseModel):
    # wire format is camelCase, python side is snake_case - accept both
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ListAttributeFilter(_WireModel):
    """Filter on a list of attribute elements.

    the wire format keeps the selection under a `default` key, we flatten it.
    negative_selection means "everything except attribute_elements", so a
    negated empty list is the same as no filter at all.
    """

    attribute: str | None = None
    display_form: str = Field(alias="displayForm")
    negative_selection: bool = Field(default=False, alias="negativeSelection")
    attribute_elements: list[str] = Field(default_factory=list, alias="attributeElements")

    @model_validator(mode="before")
    @classmethod
    def flatten_default(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("default"), dict):
            data = {**data, **data["default"]}
            data.pop("default")
        return data

    @property
    def selects_all(self) -> bool:
        return self.negative_selection and not self.attribute_elements


class DateFilter(_WireModel):
    """Relative date range filter, offsets are in units of the granularity."""

    dimension: str
    granularity: str  # e.g. GDC.time.week
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None

    @property
    def is_all_time(self) -> bool:
        return self.from_ is None and self.to is None


Filter = ListAttributeFilter | DateFilter

# wrapper key -> filter class. anything else is an error rather than being ignored
FILTER_TYPES: dict[str, type[ListAttributeFilter] | type[DateFilter]] = {
    "listAttributeFilter": ListAttributeFilter,
    "dateFilter": DateFilter,
}


def parse_filter(data: Any) -> Filter:
    """Build a filter model from its wire wrapper (or pass a model through)."""
    if isinstance(data, (ListAttributeFilter, DateFilter)):
        return data
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(f"Filter must be a single-key wrapper object, got: {data!r}")
    key, body = next(iter(data.items()))
    if key not in FILTER_TYPES:
        raise ValueError(f"Unknown filter type: {key}")
    return FILTER_TYPES[key].model_validate(body)


def _unwrap(data: Any, key: str) -> Any:
    if isinstance(data, dict) and set(data) == {key}:
        return data[key]
    return data


class Measure(_WireModel):
    """A measure in the measures bucket.

    facts and attributes need an aggregation, metrics already are one. the
    show_* flags ask the compiler for derived metrics (contribution and
    previous period) on top of the base measure.
    """

    type: MeasureType
    object_uri: str = Field(alias="objectUri")
    title: str
    format: str = "#,##0.00"
    aggregation: AggregationType | None = None
    measure_filters: list[ListAttributeFilter] = Field(default_factory=list, alias="measureFilters")
    show_in_percent: bool = Field(default=False, alias="showInPercent")
    show_pop: bool = Field(default=False, alias="showPoP")
    sort: SortDirection | None = None

    @model_validator(mode="before")
    @classmethod
    def unwrap(cls, data: Any) -> Any:
        return _unwrap(data, "measure")

    @field_validator("measure_filters", mode="before")
    @classmethod
    def unwrap_filters(cls, value: Any) -> Any:
        # measure filters only come as list attribute filters
        return [_unwrap(f, "listAttributeFilter") for f in value or []]

    @property
    def active_filters(self) -> list[ListAttributeFilter]:
        """Measure filters that actually restrict something."""
        return [f for f in self.measure_filters if f.attribute_elements]


class Category(_WireModel):
    """A category (slicing attribute) in the categories bucket."""

    type: CategoryType = CategoryType.ATTRIBUTE
    display_form: str = Field(alias="displayForm")
    attribute: str | None = None
    collection: str | None = None  # which ui bucket it came from, informational
    sort: SortDirection | None = None

    @model_validator(mode="before")
    @classmethod
    def unwrap(cls, data: Any) -> Any:
        return _unwrap(data, "category")


class Buckets(_WireModel):
    measures: list[Measure] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    filters: list[Filter] = Field(default_factory=list)

    @field_validator("filters", mode="before")
    @classmethod
    def dispatch_filters(cls, value: Any) -> Any:
        # same manual dispatch trick as in the loader - the discriminator is the
        # wrapper key, not a field inside the filter
        return [parse_filter(f) for f in value or []]


class VisualizationObject(_WireModel):
    """A visualization: chart type plus its buckets."""

    name: str | None = None
    title: str | None = None
    type: str | None = None  # bar, column, line, table...
    buckets: Buckets = Field(default_factory=Buckets)

    @model_validator(mode="before")
    @classmethod
    def accept_bare_buckets(cls, data: Any) -> Any:
        # allow {"measures": [...], ...} without the buckets level
        if isinstance(data, dict) and "buckets" not in data:
            bucket_keys = {"measures", "categories", "filters"}
            if bucket_keys & set(data):
                rest = {k: v for k, v in data.items() if k not in bucket_keys}
                rest["buckets"] = {k: v for k, v in data.items() if k in bucket_keys}
                return rest
        return data

    @property
    def is_bar_chart(self) -> bool:
        return self.type == "bar"
