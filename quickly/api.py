"""FastAPI application factory for the image proxy."""

import inspect
import logging
import re
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request, Response
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .errors import ServiceError
from .models import ErrorResponse, HealthResponse
from .processor import BaseProcessor, StatelessAction

logger = logging.getLogger(__name__)


@dataclass
class ServiceConfig:
    """
    Configuration for building a proxy application.

    Args:
        name: Override service name (defaults to processor.name)
        version: Override service version (defaults to processor.version)
        description: Short description for generated docs
        health_path: Route of the health check, None to disable it
        compress: Gzip responses for clients that accept it
        log_level: Root logging level
    """

    name: str | None = None
    version: str | None = None
    description: str | None = None
    health_path: str | None = "/health"
    compress: bool = True
    log_level: str = "INFO"


def create_app(processor: BaseProcessor, config: ServiceConfig | None = None) -> FastAPI:
    """
    Create a FastAPI application for a processor.

    Args:
        processor: The processor instance implementing business logic
        config: Optional service configuration
    """

    config = config or ServiceConfig()

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    service_name = config.name or processor.name
    service_version = config.version or processor.version
    service_description = config.description or f"{service_name} image proxy"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s %s", service_name, service_version)
        yield
        logger.info("Shutting down %s", service_name)
        await processor.shutdown()

    app = FastAPI(
        title=f"{service_name.title()} API",
        description=service_description,
        version=service_version,
        lifespan=lifespan,
    )

    app.state.processor = processor
    app.state.service_config = config

    if config.compress:
        app.add_middleware(GZipMiddleware)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        """Log the internal detail, answer with the generic message only."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.public_message).model_dump(),
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle Pydantic validation errors (e.g., path parameter validation)."""
        logger.warning("Validation error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Validation error").model_dump(),
        )

    if config.health_path:
        @app.get(config.health_path, response_model=HealthResponse)
        async def health_check():
            return HealthResponse(status="healthy", version=service_version)

    actions = processor.get_stateless_actions()
    if not actions:
        logger.warning(
            "Processor %s registered but get_stateless_actions() returned nothing.",
            processor.name,
        )

    def make_endpoint(action: StatelessAction):
        PathParamsModel = action.path_params_model
        query_parser = action.query_parser

        async def endpoint(request: Request):
            args = [request] if action.include_request else []
            if PathParamsModel:
                args.append(PathParamsModel(**request.path_params))
            if query_parser:
                args.append(query_parser(request.query_params))

            call_result = action.handler(*args)

            if inspect.isawaitable(call_result):
                call_result = await call_result
            if isinstance(call_result, Response):
                return call_result
            if action.media_type and isinstance(call_result, (bytes, bytearray, memoryview)):
                return Response(content=bytes(call_result), media_type=action.media_type)
            return call_result

        return endpoint

    for action in actions:
        logger.info("Registering action '%s' at %s", action.name, action.path)

        if action.path_params_model:
            path_param_names = set(re.findall(r'\{(\w+)(?::\w+)?\}', action.path))

            model_field_names = set(action.path_params_model.model_fields.keys())

            if path_param_names != model_field_names:
                raise ValueError(
                    f"Path parameters in '{action.path}' do not match "
                    f"path_params_model fields for action '{action.name}'. "
                    f"Path has {path_param_names}, model has {model_field_names}"
                )

        route_kwargs = {
            "methods": list(action.methods),
            "summary": action.summary,
            "description": action.description,
            "tags": list(action.tags) if action.tags else None,
            "response_class": Response if action.media_type else None,
            "responses": {
                422: {"model": ErrorResponse},
                500: {"model": ErrorResponse},
                502: {"model": ErrorResponse},
            },
        }
        route_kwargs = {k: v for k, v in route_kwargs.items() if v is not None}

        app.api_route(action.path, **route_kwargs)(make_endpoint(action))

    return app
