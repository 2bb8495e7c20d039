from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from common.errors import BBoxError, ExtractionLaunchError
from common.logging_setup import get_logger, setup_logging
from common.types import ExtractionRequest
from vex_server.config import Settings
from vex_server.executor import stream_extraction
from vex_server.validate import parse_bbox


log = get_logger("vex_server")

# The endpoint does not branch on method.
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the ASGI app. `settings` is captured by the handler; nothing is
    read from the environment after this point.
    """
    settings = settings or Settings.from_env()
    app = FastAPI(title="vex extraction server", version="1.0.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings

    @app.exception_handler(BBoxError)
    async def bbox_error(_: Request, exc: BBoxError) -> Response:
        return PlainTextResponse(exc.message, status_code=400)

    @app.exception_handler(ExtractionLaunchError)
    async def launch_error(_: Request, exc: ExtractionLaunchError) -> Response:
        return PlainTextResponse("Extraction process could not be started", status_code=503)

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def extract(request: Request) -> Response:
        """
        Validate ?north&south&east&west (or n/s/e/w) and stream the extract.

        400 text/plain on a bad box, 503 if the program cannot be launched,
        otherwise 200 application/octet-stream with the program's stdout.
        """
        bbox = parse_bbox(dict(request.query_params))
        return await stream_extraction(ExtractionRequest(bbox), settings)

    return app


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level, force=True)
    log.info(
        "vex server starting",
        extra={"extra": {"host": settings.host, "port": settings.port, "db": settings.db_path, "cmd": settings.command}},
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        access_log=False,
        log_config=None,
    )


# -------- local dev entrypoint --------
if __name__ == "__main__":
    main()
