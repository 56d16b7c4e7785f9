"""Identifier and MAQL expression synthesis for generated metrics.

everything here is a pure function of its arguments - no counters, no global
state. that's what makes compilation idempotent: the same measure always
produces the same identifier, so the server can reuse metrics it has already
registered instead of piling up duplicates.
"""

import hashlib
import re

from execforge.errors import CompilationError
from execforge.models.buckets import AggregationType, ListAttributeFilter, MeasureType

MAX_TITLE_LENGTH = 255
ELLIPSIS = "…"

PERCENT_FORMAT = "#,##0.00%"
PERCENT_TITLE_PREFIX = "% "
POP_TITLE_SUFFIX = " - previous year"

OBJECT_URI_RE = re.compile(r"^/gdc/md/(?P<project>[^/]+)/obj/(?P<object>[^/]+)$")


def parse_object_uri(uri: str) -> tuple[str, str]:
    """Split `/gdc/md/{project}/obj/{id}` into (project, id)."""
    match = OBJECT_URI_RE.match(uri)
    if match is None:
        raise CompilationError(f"Not a metadata object uri: {uri!r}")
    return match.group("project"), match.group("object")


def content_hash(expression: str, title: str, format: str) -> str:
    """MD5 of `expression#title#format`.

    the server keys registered metrics on this exact recipe, so it has to
    stay byte-for-byte the same or previously generated metrics won't be
    reused.
    """
    return hashlib.md5(f"{expression}#{title}#{format}".encode("utf-8")).hexdigest()


def generated_identifier(
    measure_type: MeasureType, object_uri: str, kind: str, hash_: str
) -> str:
    """Identifier for a generated metric.

    e.g. fact_myproject_1144.generated.filtered_sum.<md5>
    the prefix only depends on the source object, the hash on everything else.
    """
    project_id, object_id = parse_object_uri(object_uri)
    return f"{measure_type.value}_{project_id}_{object_id}.generated.{kind}.{hash_}"


def object_ref(uri: str) -> str:
    return f"[{uri}]"


def metric_ref(identifier: str) -> str:
    return f"{{{identifier}}}"


def filter_expression(measure_filter: ListAttributeFilter) -> str | None:
    """`[attr] IN ([e1],[e2])` for one measure filter, None if it selects nothing."""
    if not measure_filter.attribute_elements:
        return None
    if measure_filter.attribute is None:
        raise CompilationError(
            f"Measure filter on {measure_filter.display_form} has no attribute uri"
        )
    operator = "NOT IN" if measure_filter.negative_selection else "IN"
    elements = ",".join(object_ref(e) for e in measure_filter.attribute_elements)
    return f"{object_ref(measure_filter.attribute)} {operator} ({elements})"


def base_expression(
    object_uri: str,
    aggregation: AggregationType | None = None,
    measure_filters: list[ListAttributeFilter] | None = None,
) -> str:
    """`SELECT SUM([uri]) WHERE ...` or `SELECT [uri] WHERE ...` for metrics."""
    if aggregation is not None:
        select = f"{aggregation.value.upper()}({object_ref(object_uri)})"
    else:
        select = object_ref(object_uri)

    conditions = [c for c in (filter_expression(f) for f in measure_filters or []) if c]
    if conditions:
        return f"SELECT {select} WHERE {' AND '.join(conditions)}"
    return f"SELECT {select}"


def percent_expression(ref: str, attribute_uri: str) -> str:
    """Contribution of `ref` to its total across all values of the attribute."""
    return f"SELECT (SELECT {ref}) / (SELECT {ref} BY ALL {object_ref(attribute_uri)})"


def pop_expression(ref: str, attribute_uri: str) -> str:
    """Value of `ref` in the previous period of the date attribute."""
    return f"SELECT (SELECT {ref}) FOR PREVIOUS ({object_ref(attribute_uri)})"


def shorten_title(title: str, suffix: str = "") -> str:
    """Clamp title + suffix to MAX_TITLE_LENGTH characters.

    the suffix always survives intact, the title gets cut and marked with an
    ellipsis. titles ending in ")" keep the paren so "Sum (a, b, c...)" still
    reads as a closed list. when it has to cut, the result is exactly
    MAX_TITLE_LENGTH long.
    """
    max_length = MAX_TITLE_LENGTH - len(suffix)
    if len(title) > max_length:
        if title.endswith(")"):
            title = f"{title[: max_length - 2]}{ELLIPSIS})"
        else:
            title = f"{title[: max_length - 1]}{ELLIPSIS}"
    return f"{title}{suffix}"
