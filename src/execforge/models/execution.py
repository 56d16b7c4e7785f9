"""Pydantic models for execution configurations and results.

field names and nesting in to_payload() are the platform's contract - don't
"fix" the camelCase, the server won't understand anything else.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from execforge.models.buckets import SortDirection


class MetricDefinition(BaseModel):
    """A metric generated on the fly and registered with the execution."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    expression: str  # MAQL
    title: str
    format: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "metricDefinition": {
                "identifier": self.identifier,
                "expression": self.expression,
                "title": self.title,
                "format": self.format,
            }
        }


class OrderBy(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    direction: SortDirection

    def to_payload(self) -> dict[str, str]:
        return {"column": self.column, "direction": self.direction.value}


class ExecutionConfiguration(BaseModel):
    """Output of the compiler.

    columns are what the execution returns, in order. every generated column
    has a matching entry in definitions, raw object uris don't need one.
    """

    columns: list[str] = Field(default_factory=list)
    definitions: list[MetricDefinition] = Field(default_factory=list)
    where: dict[str, Any] | None = None  # None means no filtering at all, never {}
    order_by: list[OrderBy] = Field(default_factory=list)

    def get_definition(self, identifier: str) -> MetricDefinition | None:
        """Get a generated definition by identifier."""
        for definition in self.definitions:
            if definition.identifier == identifier:
                return definition
        return None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the `{"execution": {...}}` request body."""
        execution: dict[str, Any] = {
            "columns": list(self.columns),
            "orderBy": [o.to_payload() for o in self.order_by],
            "definitions": [d.to_payload() for d in self.definitions],
        }
        if self.where:
            execution["where"] = self.where
        return {"execution": execution}


class Header(BaseModel):
    """Describes one column of a data result."""

    id: str
    uri: str | None = None
    type: Literal["attrLabel", "metric"]
    title: str | None = None
    format: str | None = None  # only metrics have one


class DataResult(BaseModel):
    """Headers plus raw rows of an executed report.

    raw_data is whatever the server put in tabularDataResult.values - usually
    a list of rows, each row a list of cell values in column order.
    """

    model_config = ConfigDict(populate_by_name=True)

    headers: list[Header] = Field(default_factory=list)
    raw_data: list[Any] = Field(default_factory=list, alias="rawData")

    @property
    def row_count(self) -> int:
        return len(self.raw_data)
