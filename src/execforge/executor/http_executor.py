"""HTTP execution client for the platform.

executing a report is a two step dance:
  1. POST the execution (columns + optional definitions/filters/sort), the
     server answers with column metadata and a handle to the tabular result
  2. GET the handle until the data is ready

the second step depends on the handle from the first, so they always run in
sequence. there are no retries on purpose - a failed call surfaces as an
exception and the caller decides what to do.
"""

import asyncio
import logging
from typing import Any

import httpx

from execforge import __version__
from execforge.compiler.execution_builder import ExecutionCompiler
from execforge.config import ClientConfig
from execforge.errors import AuthenticationError, DataResultError, ExecutionFailedError
from execforge.models.buckets import VisualizationObject
from execforge.models.execution import DataResult, Header, MetricDefinition, OrderBy

logger = logging.getLogger(__name__)

EXECUTIONS_PATH = "/gdc/internal/projects/{project_id}/experimental/executions"
LOGIN_PATH = "/gdc/account/login"
TOKEN_PATH = "/gdc/account/token"


def _is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def _json_or_none(response: httpx.Response) -> Any:
    """Parse a json body, None for empty or non-json bodies."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        logger.debug("Ignoring non-json body from %s", response.url)
        return None


def _to_payload(items: list[Any]) -> list[Any]:
    # models know their wire shape, anything else is passed through verbatim
    return [item.to_payload() if hasattr(item, "to_payload") else item for item in items]


def build_headers(execution_result: dict[str, Any], elements: list[str]) -> list[Header]:
    """Build result headers from an executionResult.

    newer servers send ready-made headers, older ones only column metadata
    which we map 1:1 onto the requested elements.
    """
    if execution_result.get("headers"):
        return [Header.model_validate(h) for h in execution_result["headers"]]

    headers = []
    for column, element in zip(execution_result.get("columns", []), elements):
        if "attributeDisplayForm" in column:
            meta = column["attributeDisplayForm"].get("meta", {})
            headers.append(
                Header(
                    id=meta.get("identifier", element),
                    uri=meta.get("uri"),
                    type="attrLabel",
                    title=meta.get("title"),
                )
            )
        else:
            metric = column.get("metric", {})
            meta = metric.get("meta", {})
            headers.append(
                Header(
                    id=meta.get("identifier", element),
                    uri=meta.get("uri"),
                    type="metric",
                    title=meta.get("title"),
                    format=metric.get("content", {}).get("format"),
                )
            )
    return headers


class ExecutionClient:
    """Async client for executing reports on the platform.

    thin wrapper around httpx. keeps session cookies from login() so later
    calls are authenticated. use it as an async context manager or call
    close() when done.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration, defaults to ClientConfig().
            transport: Optional httpx transport, mostly useful for tests.
        """
        self.config = config or ClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None  # lazy init
        self.compiler = ExecutionCompiler()

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.domain,
                timeout=self.config.timeout,
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"execforge/{__version__}",
                },
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def login(self, username: str | None = None, password: str | None = None) -> None:
        """Log in and fetch a temporary token.

        credentials default to the ones in the config. the platform answers
        with session cookies which httpx keeps for us.
        """
        username = username or self.config.username
        if password is None and self.config.password is not None:
            password = self.config.password.get_secret_value()
        if not username or password is None:
            raise ValueError("Login needs a username and a password")

        logger.info("Logging in as %s", username)
        response = await self.client.post(
            LOGIN_PATH,
            json={
                "postUserLogin": {
                    "login": username,
                    "password": password,
                    "remember": 1,
                    "captcha": "",
                    "verifyCaptcha": "",
                }
            },
        )
        if not _is_success(response):
            raise AuthenticationError(response.status_code)

        response = await self.client.get(TOKEN_PATH)
        if not _is_success(response):
            raise AuthenticationError(response.status_code)

    async def get_data(
        self,
        project_id: str,
        elements: list[str],
        *,
        filters: list[dict[str, Any]] | None = None,
        order_by: list[OrderBy | dict[str, Any]] | None = None,
        definitions: list[MetricDefinition | dict[str, Any]] | None = None,
        where: dict[str, Any] | None = None,
    ) -> DataResult:
        """Execute a report for the given elements and return its data.

        Args:
            project_id: Project to execute in.
            elements: Attribute display form / metric identifiers or uris,
                one per result column.
            filters: Execution context filters (`{"uri": ..., "constraint": ...}`
                dicts), passed through as-is.
            order_by: Sort entries.
            definitions: Generated metric definitions referenced by elements.
            where: Query language filter map.

        Returns:
            DataResult with headers and raw rows.

        Raises:
            ExecutionFailedError: If the execution couldn't be created.
            DataResultError: If fetching the result failed.
            TypeError: If a filter isn't a plain dict.
        """
        execution: dict[str, Any] = {"columns": list(elements)}
        if filters is not None:
            if not all(isinstance(f, dict) for f in filters):
                raise TypeError("Execution filters must be plain dicts, not bucket filter models")
            execution["filters"] = filters
        if order_by is not None:
            execution["orderBy"] = _to_payload(order_by)
        if definitions is not None:
            execution["definitions"] = _to_payload(definitions)
        if where is not None:
            execution["where"] = where

        path = EXECUTIONS_PATH.format(project_id=project_id)
        logger.debug("Creating execution in %s for %d columns", project_id, len(elements))
        response = await self.client.post(path, json={"execution": execution})
        if not _is_success(response):
            logger.error("Execution failed with %d: %s", response.status_code, response.text)
            raise ExecutionFailedError(response.status_code)

        body = _json_or_none(response)
        execution_result = (body.get("executionResult") if isinstance(body, dict) else None) or {}
        headers = build_headers(execution_result, elements)

        data_uri = execution_result.get("tabularDataResult")
        raw_data = await self._fetch_tabular_data(data_uri) if data_uri else []

        return DataResult(headers=headers, raw_data=raw_data)

    async def get_data_for_visualization(
        self, project_id: str, vis: VisualizationObject | dict[str, Any]
    ) -> DataResult:
        """Compile a visualization object and execute it."""
        if not isinstance(vis, VisualizationObject):
            vis = VisualizationObject.model_validate(vis)
        config = self.compiler.compile(vis)
        return await self.get_data(
            project_id,
            config.columns,
            order_by=config.order_by,
            definitions=config.definitions,
            where=config.where,
        )

    async def _fetch_tabular_data(self, data_uri: str) -> list[Any]:
        """Poll the data result until it's ready.

        202 means "still computing". a missing body (204, or an empty 200)
        is how the server says the result has no rows - that's not an error.
        """
        for attempt in range(self.config.max_poll_attempts):
            response = await self.client.get(data_uri)

            if response.status_code == 202:
                logger.debug(
                    "Data result not ready (poll %d/%d)",
                    attempt + 1,
                    self.config.max_poll_attempts,
                )
                await asyncio.sleep(self.config.poll_interval)
                continue

            if not _is_success(response):
                logger.error("Data result failed with %d", response.status_code)
                raise DataResultError(response.status_code)

            body = _json_or_none(response)
            if not isinstance(body, dict):
                return []
            values = (body.get("tabularDataResult") or {}).get("values")
            return list(values) if values else []

        logger.error("Data result still not ready after %d polls", self.config.max_poll_attempts)
        raise DataResultError(202)

    async def close(self) -> None:
        """Close the http client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ExecutionClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
