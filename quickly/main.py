"""Main entrypoint for the image proxy."""

import logging
import sys

import uvicorn
from pydantic import ValidationError

from .config import Settings
from .proxy import create_proxy_app

logger = logging.getLogger(__name__)

EXIT_CODE_BINDERR = 1
EXIT_CODE_MISSING_UPSTREAM = 3
EXIT_CODE_BADCONFIG = 4


def load_settings() -> Settings | int:
    """Read settings from the environment, or return the exit code to stop with."""
    try:
        return Settings()
    except ValidationError as exc:
        errors = exc.errors()
        if any(err["type"] == "missing" for err in errors):
            print("`QUICKLY_UPSTREAM` is not set!", file=sys.stderr)
            return EXIT_CODE_MISSING_UPSTREAM
        if any(str(part).endswith("bind") for err in errors for part in err["loc"]):
            print(f"Unable to bind: {exc}", file=sys.stderr)
            return EXIT_CODE_BINDERR
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_CODE_BADCONFIG


def main() -> int:
    """Run the image proxy."""
    settings = load_settings()
    if isinstance(settings, int):
        return settings

    app = create_proxy_app(settings)
    logger.info("Server listening on %s, upstream %s", settings.bind, settings.upstream_uri)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
