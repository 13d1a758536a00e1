"""HTTP entry point for the skill report.

The API key is read from the environment once, when the module is imported,
and handed to :class:`apps.report.ReportHandler` on every request.  The raw
body is passed through untouched so that malformed input produces the
handler's own 400 reply instead of FastAPI's validation error.
"""

import os
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from apps.report import ReportHandler
from lib.config.report_loader import resolve_api_key


def create_app(handler: ReportHandler, api_key: Optional[str]) -> FastAPI:
    app = FastAPI(title="AI skill report")

    @app.post("/ai-report")
    async def ai_report(request: Request):
        """Return ``{"html": ...}`` lessons for the posted skills."""

        body = await request.body()
        status, payload = await run_in_threadpool(handler.handle, body, api_key)
        return JSONResponse(status_code=status, content=payload)

    @app.get("/health")
    async def health():
        """Basic health check endpoint."""
        return {
            "status": "ok",
            "api_key_configured": bool(api_key),
            "model": handler.config.upstream.model,
        }

    return app


handler = ReportHandler()
app = create_app(handler, resolve_api_key(handler.config))


if __name__ == "__main__":
    uvicorn.run(app, host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8000")))
