"""Entry point for the day score service.

Wires all components together and either serves the JSON API (default)
or runs a single fetch cycle and logs the result.

Component wiring order (in build_components):
1. TTLCache (shared signal cache)
2. HttpClient (shared aiohttp session)
3. Signal sources (weather, news, market, energy)
4. JsonFileStorage, HistoryStore, SettingsStore (persistence)
5. Aggregator (seeded with today's mood from history)
6. Orchestrator (fetch cycles)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from vibe.config import AppSettings
from vibe.data import HistoryStore, JsonFileStorage, SettingsStore
from vibe.logging import get_logger, setup_logging
from vibe.models import Signal
from vibe.orchestrator import Orchestrator
from vibe.scoring.aggregator import Aggregator
from vibe.sources import (
    EnergySource,
    HttpClient,
    MarketSource,
    NewsSource,
    TTLCache,
    WeatherSource,
)


def build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Does NOT open the HTTP session; that happens in the lifespan
    (API mode) or run_once().

    Returns:
        Dict mapping component names to instances.
    """
    cache: TTLCache[Signal] = TTLCache(ttl_seconds=settings.cache.ttl_seconds)
    http = HttpClient(settings.sources)

    sources = [
        WeatherSource(http, cache, settings.sources),
        NewsSource(http, cache, settings.sources),
        MarketSource(http, cache, settings.sources),
        EnergySource(http, cache, settings.sources),
    ]

    storage = JsonFileStorage(settings.storage.data_dir)
    history = HistoryStore(
        storage,
        key=settings.storage.history_key,
        limit=settings.storage.history_limit,
        timezone=settings.sources.timezone,
    )
    user_settings = SettingsStore(storage, key=settings.storage.settings_key)

    aggregator = Aggregator(settings.scoring.weights(), mood=history.get_today_mood())

    orchestrator = Orchestrator(
        sources=sources,
        aggregator=aggregator,
        history=history,
        user_settings=user_settings,
        cache=cache,
    )

    return {
        "cache": cache,
        "http": http,
        "sources": sources,
        "history": history,
        "user_settings": user_settings,
        "aggregator": aggregator,
        "orchestrator": orchestrator,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the HTTP session, run the initial fetch cycle, and close on shutdown."""
    logger = get_logger("vibe.main")
    components = app.state.components

    app.state.orchestrator = components["orchestrator"]

    await components["http"].connect()
    initial_task = asyncio.create_task(components["orchestrator"].refresh())

    logger.info("lifespan_started", location=components["orchestrator"].location.id)

    yield

    if not initial_task.done():
        initial_task.cancel()
    try:
        await initial_task
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.exception("initial_refresh_failed")

    await components["http"].close()
    logger.info("dagens_vibe_stopped")


async def run_once(components: dict[str, Any]) -> None:
    """Run a single fetch cycle and log the outcome."""
    logger = get_logger("vibe.main")
    http: HttpClient = components["http"]
    orchestrator: Orchestrator = components["orchestrator"]

    await http.connect()
    try:
        result = await orchestrator.refresh()
    finally:
        await http.close()

    if result is not None:
        logger.info(
            "day_score",
            location=result.location.name,
            total=result.day_score.total,
            status=result.day_score.status,
            description=result.day_score.description,
            notice=result.notice,
        )


async def run() -> None:
    """Run the service.

    When the dashboard is enabled (DASHBOARD_ENABLED=true, the default) the
    JSON API is served by uvicorn in this event loop. Otherwise a single
    fetch cycle is run and logged.
    """
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("vibe.main")
    logger.info(
        "settings_loaded",
        weights=settings.scoring.weights(),
        cache_ttl=settings.cache.ttl_seconds,
        data_dir=settings.storage.data_dir,
    )

    components = build_components(settings)

    if not settings.dashboard.enabled:
        await run_once(components)
        return

    from vibe.dashboard.app import create_dashboard_app

    app = create_dashboard_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components

    logger.info(
        "starting_api",
        host=settings.dashboard.host,
        port=settings.dashboard.port,
    )

    config = uvicorn.Config(
        app,
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
