import argparse
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Body, Depends, FastAPI, HTTPException
from pydantic import BaseModel

from .. import __version__
from ..config import Settings, get_settings
from ..observability import TelemetrySink, setup_logging
from .cache_loader import CacheNotFoundError, KnowledgeCache
from .tools import TOOLS_BY_NAME, ToolContext, dispatch, tool_definitions

logger = logging.getLogger(__name__)


class ToolDefinition(BaseModel):
    name: str
    description: str
    inputSchema: Dict[str, Any]


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolResult(BaseModel):
    content: List[TextContent]


def create_app(settings: Optional[Settings] = None, cache: Optional[KnowledgeCache] = None,
               telemetry: Optional[TelemetrySink] = None) -> FastAPI:
    """Build the HTTP app over one cache. The cache is loaded on first tool call."""
    settings = settings or get_settings()
    cache = cache or KnowledgeCache(settings=settings)
    telemetry = telemetry or TelemetrySink(settings.telemetry_file)
    context = ToolContext(cache)

    app = FastAPI(title="SDKFoundry Lookup API", version=__version__)

    def get_context(name: str) -> ToolContext:
        if name not in TOOLS_BY_NAME:
            raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")
        try:
            cache.load()
        except CacheNotFoundError as e:
            raise HTTPException(status_code=503, detail=str(e))
        return context

    @app.get("/health")
    def health():
        return {"ok": True, "time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")}

    @app.get("/tools", response_model=List[ToolDefinition])
    def list_tools():
        return tool_definitions()

    @app.post("/tools/{name}", response_model=ToolResult)
    def call(name: str, arguments: Optional[Dict[str, Any]] = Body(default=None),
             ctx: ToolContext = Depends(get_context)):
        arguments = arguments or {}
        telemetry.record(name, arguments)
        return dispatch(ctx, name, arguments)

    return app


def run(argv=None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="SDKFoundry lookup tools over HTTP")
    parser.add_argument('--host', default=settings.get('http.host', '127.0.0.1'))
    parser.add_argument('--port', type=int, default=settings.get('http.port', 8080))
    parser.add_argument('--log-level', default=settings.get('logging.level', 'INFO'))
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=settings.get('logging.file'),
                  use_json=bool(settings.get('logging.json', False)))
    uvicorn.run(create_app(settings), host=args.host, port=args.port)
    return 0
