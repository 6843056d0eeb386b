"""HTTP client for a running unified-mind MCP endpoint."""

import itertools
import json
from typing import Any, Self

import httpx

from unified_mind.core.base import ErrorLevel, ServiceErrorDetails
from unified_mind.core.decorators import with_error_handling
from unified_mind.core.errors import ServiceError
from unified_mind.core.logging import get_logger
from unified_mind.domain.models import MemoryType
from unified_mind.mcp import tools

logger = get_logger(__name__)


class MemoryClient:
    """Calls tools on the MCP endpoint with JSON-RPC ``tools/call`` requests.

    ``ingest`` matches the signature of ``MemoryWriter.ingest`` so either can
    feed the bulk ingestion driver.
    """

    def __init__(self, url: str, timeout: float = 60.0, client: httpx.AsyncClient | None = None):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _failure(self, message: str, status_code: int | None = None) -> ServiceError:
        return ServiceError(
            message=message,
            details=ServiceErrorDetails(
                source="MemoryClient",
                operation="tools/call",
                service_name="unified-mind",
                endpoint=self.url,
                status_code=status_code,
            ),
        )

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=True)
    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Invoke a tool and return its decoded result.

        Raises:
            ServiceError: On transport failure, a non-JSON body or a JSON-RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        }
        try:
            response = await self._client.post(self.url, json=payload)
            body = response.json()
        except httpx.HTTPError as e:
            raise self._failure(f"Request to {self.url} failed: {e!s}") from e
        except ValueError as e:
            raise self._failure(
                f"Non-JSON response from {self.url}", status_code=response.status_code
            ) from e

        if not isinstance(body, dict):
            raise self._failure(f"Unexpected response from {self.url}", status_code=response.status_code)
        if body.get("error"):
            error = body["error"]
            raise self._failure(
                f"{name} failed ({error.get('code')}): {error.get('message')}",
                status_code=response.status_code,
            )

        content = (body.get("result") or {}).get("content") or []
        text = content[0].get("text") if content else None
        if text is None:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def ingest(
        self,
        content: str,
        entity_name: str,
        source_platform: str,
        memory_type: MemoryType | str,
        metadata: dict[str, Any] | None = None,
    ) -> Any:
        return await self.call_tool(
            tools.INGEST,
            {
                "content": content,
                "entity_name": entity_name,
                "source_platform": source_platform,
                "memory_type": MemoryType(memory_type).value,
                "metadata": metadata or {},
            },
        )
