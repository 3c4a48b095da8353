# core/server_factory.py

import logging
from typing import Any, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from core.config import PipelineConfig
from core.exceptions import GeometryError
from waterfall.mapper import WaterfallMapper

logger = logging.getLogger(__name__)


def forward(forwarder: Any, document: str, separator: str) -> Tuple[Optional[Exception], int]:
    """
    Hand a rendered document to the forwarder and collect what its callback reported.
    """
    outcome = {"error": None, "bytes": 0}

    def callback(error: Optional[Exception], byte_count: int) -> None:
        outcome["error"] = error
        outcome["bytes"] = byte_count

    forwarder.send(document, separator, callback)
    return outcome["error"], outcome["bytes"]


def create_server(config: PipelineConfig, mapper: WaterfallMapper, forwarder: Any) -> FastAPI:
    """
    Creates the FastAPI beacon receiver.
    """
    app = FastAPI(title="Beacon Receiver")

    # Beacons arrive from arbitrary page origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["*"],
    )

    def process_beacon(data: Any, referer: str) -> Response:
        # Called through the threadpool; rendering and forwarding block.
        try:
            document = mapper(data, referer)
        except GeometryError as e:
            logger.warning(f"Dropped beacon from {referer or 'unknown page'}: {e}")
            return JSONResponse(status_code=422, content={"error": "Unusable resource timings", "message": str(e)})

        if not document:
            logger.debug(f"Beacon from {referer or 'unknown page'} carried no resource timings")
            return Response(status_code=204)

        error, byte_count = forward(forwarder, document, config.separator)
        if error:
            return JSONResponse(status_code=500, content={"error": "Failed to forward beacon", "message": str(error)})

        logger.debug(f"Forwarded {byte_count} bytes for {referer or 'unknown page'}")
        return Response(status_code=204)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.post(config.path)
    async def receive_beacon(request: Request):
        try:
            data = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Beacon body must be valid JSON"})

        referer = request.headers.get("referer") or request.query_params.get("referer") or ""
        return await run_in_threadpool(process_beacon, data, referer)

    return app
