"""Base processor interface for the proxy's request/response actions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Mapping

from pydantic import BaseModel


@dataclass
class StatelessAction:
    """
    Definition of a stateless API route backed by a processor method.

    Attributes:
        name: Short identifier used for logging and OpenAPI docs.
        path: FastAPI route path (e.g., "/{path:path}").
        handler: Callable invoked with the request (when include_request is set),
            the validated path params and the parsed query.
        path_params_model: Optional Pydantic model built from the route's path parameters.
        query_parser: Optional callable turning the raw query mapping into the
            value handed to the handler. It must not raise for bad input.
        include_request: Pass the raw Starlette request as the first handler argument.
        methods: HTTP methods to expose (defaults to GET).
        summary: Optional OpenAPI summary.
        description: Optional longer description.
        tags: Optional OpenAPI tags.
        media_type: Optional media type for byte results.
    """

    name: str
    path: str
    handler: Callable[..., Awaitable[Any] | Any]
    path_params_model: type[BaseModel] | None = None
    query_parser: Callable[[Mapping[str, str]], Any] | None = None
    include_request: bool = False
    methods: tuple[str, ...] = ("GET",)
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] | None = None
    media_type: str | None = None


class BaseProcessor(ABC):
    """Hook point for proxy services."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Processor/service name used for logging and metadata."""

    @property
    def version(self) -> str:
        """Optional semantic version string."""
        return "1.0.0"

    def get_stateless_actions(self) -> List[StatelessAction]:
        """
        Return the list of stateless actions provided by this processor.

        Override in subclasses to expose endpoints.
        """
        return []

    async def shutdown(self) -> None:
        """Release resources held by the processor. Called once at app shutdown."""
