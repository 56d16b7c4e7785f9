"""Compiler from visualization objects to execution configurations.

this is where the business rules live - turning a declarative bucket
description into the column list, generated metric definitions, where clause
and sort order the platform expects.

the basic flow:
  1. categories become columns as-is (they point at existing display forms)
  2. each measure is resolved to a base column, then optionally wrapped in a
     contribution (percent) metric and then a previous-period (PoP) metric
  3. sort entries are collected from categories and measures
  4. bucket filters become the where clause, skipping the no-op ones

no i/o anywhere in here, compile() is a pure function of its input.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from execforge.compiler.expressions import (
    PERCENT_FORMAT,
    PERCENT_TITLE_PREFIX,
    POP_TITLE_SUFFIX,
    base_expression,
    content_hash,
    generated_identifier,
    metric_ref,
    object_ref,
    percent_expression,
    pop_expression,
    shorten_title,
)
from execforge.errors import CompilationError
from execforge.models.buckets import (
    CategoryType,
    DateFilter,
    Filter,
    ListAttributeFilter,
    Measure,
    MeasureType,
    VisualizationObject,
)
from execforge.models.execution import ExecutionConfiguration, MetricDefinition, OrderBy

logger = logging.getLogger(__name__)


@dataclass
class ResolvedMeasure:
    """A measure resolved to the column that represents it.

    intermediate representation used while wrapping measures in percent/PoP
    metrics - each wrapper needs to know how to reference what it wraps.
    """

    column: str  # what goes into the columns list
    ref: str  # how an expression refers to it: [uri] or {identifier}
    title: str  # untruncated, derived titles are built from this
    format: str
    definitions: list[MetricDefinition] = field(default_factory=list)


class ExecutionCompiler:
    """Compiles visualization objects into execution configurations.

    stateless - one instance can compile any number of objects.
    """

    def compile(self, vis: VisualizationObject) -> ExecutionConfiguration:
        """Convert a VisualizationObject into an ExecutionConfiguration."""
        buckets = vis.buckets

        # step 1: categories reference existing display forms, no definitions
        columns = [category.display_form for category in buckets.categories]
        definitions: dict[str, MetricDefinition] = {}  # identifier -> definition, keeps order
        measure_sorts: list[OrderBy] = []

        # step 2: measures, each contributing one column (two with PoP)
        for measure in buckets.measures:
            measure_columns, measure_definitions = self._compile_measure(measure, vis)
            columns.extend(measure_columns)
            for definition in measure_definitions:
                definitions.setdefault(definition.identifier, definition)

            # the generated PoP column is never sortable
            if measure.sort is not None and not measure.show_pop:
                measure_sorts.append(OrderBy(column=measure_columns[-1], direction=measure.sort))

        # step 3: sorting, bar charts only sort by measures
        order_by = self._build_order_by(vis, measure_sorts)

        # step 4: filters
        where = self._build_where(buckets.filters)

        logger.debug(
            "Compiled %s: %d columns, %d definitions",
            vis.name or "visualization",
            len(columns),
            len(definitions),
        )

        return ExecutionConfiguration(
            columns=columns,
            definitions=list(definitions.values()),
            where=where,
            order_by=order_by,
        )

    def _compile_measure(
        self, measure: Measure, vis: VisualizationObject
    ) -> tuple[list[str], list[MetricDefinition]]:
        """Resolve a measure and its percent/PoP wrappers to columns + definitions."""
        resolved = self._resolve_base(measure)

        # percent first, PoP wraps whatever we have at that point
        if measure.show_in_percent:
            resolved = self._wrap_percent(measure, resolved, vis)

        if measure.show_pop:
            pop = self._wrap_pop(measure, resolved, vis)
            # PoP shows the previous period next to the current one
            return [pop.column, resolved.column], pop.definitions

        return [resolved.column], resolved.definitions

    def _resolve_base(self, measure: Measure) -> ResolvedMeasure:
        """Resolve the unwrapped measure.

        metrics without filters are used directly - they already exist on the
        server. everything else needs a generated definition.
        """
        filters = measure.active_filters

        match measure.type:
            case MeasureType.METRIC:
                if not filters:
                    return ResolvedMeasure(
                        column=measure.object_uri,
                        ref=object_ref(measure.object_uri),
                        title=measure.title,
                        format=measure.format,
                    )
                kind = "filtered_base"
                aggregation = None
            case MeasureType.FACT | MeasureType.ATTRIBUTE:
                if measure.aggregation is None:
                    raise CompilationError(
                        f"Measure '{measure.title}' of type {measure.type.value} "
                        "needs an aggregation"
                    )
                aggregation = measure.aggregation
                kind = f"filtered_{aggregation.value}" if filters else aggregation.value
            case _:
                raise CompilationError(f"Unknown measure type: {measure.type}")

        expression = base_expression(measure.object_uri, aggregation, filters)
        definition = self._define(
            measure,
            kind=kind,
            expression=expression,
            title=shorten_title(measure.title),
            format=measure.format,
        )
        return ResolvedMeasure(
            column=definition.identifier,
            ref=metric_ref(definition.identifier),
            title=measure.title,
            format=measure.format,
            definitions=[definition],
        )

    def _wrap_percent(
        self, measure: Measure, inner: ResolvedMeasure, vis: VisualizationObject
    ) -> ResolvedMeasure:
        """Wrap a resolved measure in a contribution-to-total metric.

        the total is taken BY ALL values of the first category's attribute.
        """
        categories = vis.buckets.categories
        attribute = categories[0].attribute if categories else None
        if attribute is None:
            raise CompilationError(
                f"Measure '{measure.title}' is shown in percent but the first "
                "category has no attribute to compute the total over"
            )

        # titles saved from an earlier percent measure already carry the prefix
        title = f"{PERCENT_TITLE_PREFIX}{measure.title.removeprefix(PERCENT_TITLE_PREFIX)}"
        definition = self._define(
            measure,
            kind="percent",
            expression=percent_expression(inner.ref, attribute),
            title=shorten_title(title),
            format=PERCENT_FORMAT,
        )
        return ResolvedMeasure(
            column=definition.identifier,
            ref=metric_ref(definition.identifier),
            title=title,
            format=PERCENT_FORMAT,
            definitions=[*inner.definitions, definition],
        )

    def _wrap_pop(
        self, measure: Measure, inner: ResolvedMeasure, vis: VisualizationObject
    ) -> ResolvedMeasure:
        """Wrap a resolved measure in a previous-period metric.

        the period comes from the attribute behind the first date category.
        """
        date_category = next(
            (c for c in vis.buckets.categories if c.type == CategoryType.DATE), None
        )
        if date_category is None or date_category.attribute is None:
            raise CompilationError(
                f"Measure '{measure.title}' requests period over period but there "
                "is no date category with an attribute"
            )

        definition = self._define(
            measure,
            kind="pop",
            expression=pop_expression(inner.ref, date_category.attribute),
            title=shorten_title(inner.title, POP_TITLE_SUFFIX),
            format=inner.format,
        )
        return ResolvedMeasure(
            column=definition.identifier,
            ref=metric_ref(definition.identifier),
            title=f"{inner.title}{POP_TITLE_SUFFIX}",
            format=inner.format,
            definitions=[*inner.definitions, definition],
        )

    def _define(
        self, measure: Measure, kind: str, expression: str, title: str, format: str
    ) -> MetricDefinition:
        hash_ = content_hash(expression=expression, title=title, format=format)
        identifier = generated_identifier(measure.type, measure.object_uri, kind, hash_)
        return MetricDefinition(
            identifier=identifier,
            expression=expression,
            title=title,
            format=format,
        )

    def _build_order_by(
        self, vis: VisualizationObject, measure_sorts: list[OrderBy]
    ) -> list[OrderBy]:
        """Build the sort list.

        bar charts are sorted by value only - sorting bars by category too
        just fights the measure sort.
        """
        if vis.is_bar_chart:
            return measure_sorts

        category_sorts = [
            OrderBy(column=c.display_form, direction=c.sort)
            for c in vis.buckets.categories
            if c.sort is not None
        ]
        return category_sorts + measure_sorts

    def _build_where(self, filters: list[Filter]) -> dict[str, Any] | None:
        """Build the where clause, or None if no filter restricts anything."""
        where: dict[str, Any] = {}

        for bucket_filter in filters:
            match bucket_filter:
                case ListAttributeFilter():
                    # negated empty selection == everything selected
                    if bucket_filter.selects_all:
                        continue
                    where[bucket_filter.display_form] = self._attribute_condition(bucket_filter)
                case DateFilter():
                    if bucket_filter.is_all_time:
                        continue
                    where[bucket_filter.dimension] = {
                        "$between": [bucket_filter.from_, bucket_filter.to],
                        "$granularity": bucket_filter.granularity,
                    }
                case _:
                    raise CompilationError(f"Unknown filter: {bucket_filter!r}")

        return where or None

    def _attribute_condition(self, bucket_filter: ListAttributeFilter) -> dict[str, Any]:
        # TODO: a non-negated empty selection currently encodes "$in": [] (match
        # nothing); confirm with the platform team whether it should be elided too
        condition = {"$in": [{"id": element_id(e)} for e in bucket_filter.attribute_elements]}
        if bucket_filter.negative_selection:
            return {"$not": condition}
        return condition


def element_id(element_uri: str) -> int | str:
    """Trailing `id=` value of an attribute element uri, as int when numeric."""
    value = element_uri.rsplit("=", 1)[-1]
    return int(value) if value.isdigit() else value


def md_to_execution_configuration(
    vis: VisualizationObject | dict[str, Any],
) -> ExecutionConfiguration:
    """Compile a visualization object (model or raw dict) in one call."""
    if not isinstance(vis, VisualizationObject):
        vis = VisualizationObject.model_validate(vis)
    return ExecutionCompiler().compile(vis)
