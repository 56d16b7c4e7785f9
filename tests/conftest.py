"""Pytest fixtures for execforge tests."""

import copy
from pathlib import Path
from typing import Any

import pytest

from execforge.config import ClientConfig

PROJECT = "qamfsd9cw85e53mcqs74k8a0mwbf5gc2"


def obj(object_id: int | str) -> str:
    """Metadata object uri in the test project."""
    return f"/gdc/md/{PROJECT}/obj/{object_id}"


def element(attribute_id: int, element_id: int) -> str:
    return f"{obj(attribute_id)}/elements?id={element_id}"


@pytest.fixture
def md_obj() -> dict[str, Any]:
    """A column chart with all measure types, a category and both filter kinds."""
    return {
        "type": "column",
        "buckets": {
            "measures": [
                {
                    "measure": {
                        "type": "fact",
                        "aggregation": "sum",
                        "objectUri": obj(1144),
                        "title": "Sum of Amount",
                        "format": "#,##0.00",
                        "measureFilters": [
                            {
                                "listAttributeFilter": {
                                    "attribute": obj(949),
                                    "displayForm": obj(952),
                                    "default": {
                                        "negativeSelection": False,
                                        "attributeElements": [
                                            element(949, 168284),
                                            element(949, 168282),
                                        ],
                                    },
                                }
                            }
                        ],
                        "sort": "desc",
                    }
                },
                {
                    "measure": {
                        "type": "attribute",
                        "aggregation": "count",
                        "objectUri": obj(1244),
                        "title": "Count of Activity",
                        "format": "#,##0.00",
                        "measureFilters": [],
                    }
                },
                {
                    "measure": {
                        "type": "metric",
                        "objectUri": obj(1556),
                        "title": "Probability BOP",
                        "format": "#,##0.00",
                        "measureFilters": [],
                    }
                },
                {
                    "measure": {
                        "type": "metric",
                        "objectUri": obj(2825),
                        "title": "# of Opportunities (Account: 1 Source Consulting, 14 West)",
                        "format": "#,##0",
                        "measureFilters": [
                            {
                                "listAttributeFilter": {
                                    "attribute": obj(969),
                                    "displayForm": obj(970),
                                    "default": {
                                        "negativeSelection": False,
                                        "attributeElements": [
                                            element(969, 961042),
                                            element(969, 961038),
                                        ],
                                    },
                                }
                            }
                        ],
                    }
                },
            ],
            "categories": [
                {
                    "category": {
                        "type": "attribute",
                        "collection": "attribute",
                        "displayForm": obj(1028),
                        "sort": "asc",
                    }
                }
            ],
            "filters": [
                {
                    "listAttributeFilter": {
                        "attribute": obj(1025),
                        "displayForm": obj(1028),
                        "default": {
                            "negativeSelection": False,
                            "attributeElements": [
                                element(1025, 1243),
                                element(1025, 1242),
                                element(1025, 1241),
                            ],
                        },
                    }
                },
                {
                    "dateFilter": {
                        "dimension": obj(16561),
                        "granularity": "GDC.time.week",
                        "from": -3,
                        "to": 0,
                    }
                },
            ],
        },
    }


@pytest.fixture
def sum_measure() -> dict[str, Any]:
    """Plain sum of a fact, no filters."""
    return {
        "type": "fact",
        "aggregation": "sum",
        "objectUri": obj(1144),
        "title": "Sum of Amount",
        "format": "#,##0.00",
        "measureFilters": [],
    }


@pytest.fixture
def date_category() -> dict[str, Any]:
    return {
        "type": "date",
        "collection": "attribute",
        "displayForm": obj(1234),
        "attribute": obj(1233),
    }


@pytest.fixture
def attribute_category() -> dict[str, Any]:
    return {
        "type": "attribute",
        "collection": "attribute",
        "displayForm": obj(1028),
        "attribute": obj(1027),
    }


def with_measures(md: dict[str, Any], *measures: dict[str, Any]) -> dict[str, Any]:
    """Copy of md with the measures bucket replaced."""
    md = copy.deepcopy(md)
    md["buckets"]["measures"] = [{"measure": m} for m in measures]
    return md


@pytest.fixture
def sample_visualizations_yaml() -> str:
    """Sample visualization definitions for loader/workspace/cli tests."""
    return f"""
visualizations:
  - name: amount_by_region
    title: Amount by region
    type: bar
    buckets:
      measures:
        - measure:
            type: fact
            aggregation: sum
            objectUri: {obj(1144)}
            title: Sum of Amount
            format: "#,##0.00"
            sort: desc
      categories:
        - category:
            type: attribute
            attribute: {obj(1027)}
            displayForm: {obj(1028)}
            sort: asc

  - name: opportunities_share
    type: column
    buckets:
      measures:
        - measure:
            type: metric
            objectUri: {obj(2825)}
            title: "# of Opportunities"
            format: "#,##0"
            showInPercent: true
      categories:
        - category:
            type: attribute
            attribute: {obj(1027)}
            displayForm: {obj(1028)}
"""


@pytest.fixture
def definitions_dir(tmp_path: Path, sample_visualizations_yaml: str) -> Path:
    """Temporary definitions directory with sample YAML."""
    path = tmp_path / "visualizations"
    path.mkdir()
    (path / "sales.yaml").write_text(sample_visualizations_yaml)
    return path


@pytest.fixture
def client_config() -> ClientConfig:
    """Config pointing at a fake domain with no poll delay."""
    return ClientConfig(
        domain="https://example.gooddata.test",
        project_id="myFakeProjectId",
        poll_interval=0,
        max_poll_attempts=3,
    )
