from contextlib import asynccontextmanager
from fastapi import Body, FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import AliasChoices, BaseModel, Field
from typing import Any, Dict
from datetime import datetime, timezone
import logging
import re

from api.config import settings
from scrapers.crawlers.renderer import RendererFactory
from scrapers.manager import ScraperManager, default_renderer_factory

# Setup logging directory
settings.log_dir.mkdir(exist_ok=True)


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


# Setup logging with color support for console, stripped for file
file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
file_handler.setFormatter(ColorStripFormatter(settings.log_format))

console_handler = logging.StreamHandler()
console_handler.setFormatter(logging.Formatter(settings.log_format))

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    handlers=[file_handler, console_handler],
    force=True  # Override any existing configuration
)

logger = logging.getLogger(__name__)


# Filter to suppress noisy health-check access logs
class HealthCheckFilter(logging.Filter):
    SUPPRESSED_ENDPOINTS = ['/health']

    def filter(self, record):
        msg = record.getMessage()
        return not any(endpoint in msg for endpoint in self.SUPPRESSED_ENDPOINTS)


logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info("Portal Scraper Backend Starting Up")
    logger.info("=" * 60)
    logger.info(f"Log file: {settings.log_file}")
    logger.info(f"CORS origins: {settings.cors_origins}")
    logger.info(
        f"Navigation timeout: {settings.scraper_navigation_timeout}s, "
        f"detail concurrency: {settings.scraper_detail_concurrency}"
    )
    logger.info("Backend ready to accept requests")

    yield  # Application runs here

    logger.info("Portal Scraper Backend Shutting Down")


app = FastAPI(
    title="Portal Scraper API",
    version="1.0.0",
    lifespan=lifespan
)

# Note: allow_credentials must be False when allow_origins is ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ScrapeRequestBody(BaseModel):
    """
    Inbound scrape request.

    Values are left untyped on purpose: invalid input is reported as an
    `error` event on the stream rather than as an HTTP 422.
    """
    target_region: Any = Field(None, validation_alias=AliasChoices('targetRegion', 'country'))
    category_key: Any = Field(None, validation_alias=AliasChoices('categoryKey', 'degree'))
    requested_fields: Any = Field(None, validation_alias=AliasChoices('requestedFields', 'fields'))

    @classmethod
    def from_raw(cls, raw: Any) -> "ScrapeRequestBody":
        """Build from any decoded JSON body. Non-objects become an empty request."""
        if not isinstance(raw, dict):
            return cls()
        return cls.model_validate(raw)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'country': self.target_region,
            'degree': self.category_key,
            'fields': self.requested_fields,
        }


def get_renderer_factory() -> RendererFactory:
    """Renderer used for scrape requests (overridden in tests)."""
    return default_renderer_factory(
        headless=settings.scraper_headless,
        timeout=settings.scraper_navigation_timeout,
        user_agent=settings.scraper_user_agent,
    )


@app.get("/")
async def root():
    return {"message": "Portal Scraper API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/portals")
async def get_portals():
    """List supported degree categories and requestable fields"""
    return ScraperManager.list_portals()


@app.post("/scrape")
async def scrape(
    body: Any = Body(None),
    renderer_factory: RendererFactory = Depends(get_renderer_factory),
):
    """
    Scrape program listings and stream progress as Server-Sent Events.

    Event kinds: progress, warning, entry, error, done. The stream always
    ends with exactly one `done` or `error` event.
    """
    payload = ScrapeRequestBody.from_raw(body).to_payload()
    logger.info(f"Request payload: {payload}")
    manager = ScraperManager(renderer_factory, settings.crawl_options())

    async def frames():
        async for event in manager.stream_scrape(payload):
            yield event.to_sse()

    return StreamingResponse(
        frames(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # disable nginx proxy buffering
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        access_log=True,
        log_config=None,  # Keep the logging configured above
        timeout_keep_alive=5,
        timeout_graceful_shutdown=5.0,
    )
