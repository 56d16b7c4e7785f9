"""Reshaping data results for chart libraries.

chord charts want a square matrix where row/column i is one "group". we get
two attributes and one metric, so the groups are the values of both
attributes - first attribute's values first, then the second's.
"""

from typing import Any

from execforge.models.execution import DataResult


def chord_matrix(result: DataResult) -> list[list[float]]:
    """Transform a two-attribute, one-metric result into a chord matrix.

    the first two headers must be the attributes, the third the metric.
    rows for first-attribute values are n1 zeros followed by that value's
    metric values; rows for second-attribute values are the metric values
    followed by n2 zeros.
    """
    if len(result.headers) < 3:
        raise ValueError("Chord matrix needs two attribute headers and a metric header")

    first_values: dict[Any, list[float]] = {}
    second_values: dict[Any, list[float]] = {}

    for row in result.raw_data:
        first_key, second_key, metric_value = row[0], row[1], float(row[2])
        first_values.setdefault(first_key, []).append(metric_value)
        second_values.setdefault(second_key, []).append(metric_value)

    first_count = len(first_values)
    second_count = len(second_values)

    matrix = [[0.0] * first_count + values for values in first_values.values()]
    matrix.extend(values + [0.0] * second_count for values in second_values.values())
    return matrix
