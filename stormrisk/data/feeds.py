import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from pydantic import ValidationError

from ..config import API_BASE, FEED_PATHS, HTTP_TIMEOUT
from ..errors import LoadFailure
from .schemas import (
    DistrictCollection,
    FacilityCollection,
    StormTrackCollection,
    SummaryStats,
)

LOGGER = logging.getLogger(__name__)

FEED_MODELS = {
    "bangladesh": DistrictCollection,
    "amphan": StormTrackCollection,
    "health": FacilityCollection,
    "education": FacilityCollection,
    "stats": SummaryStats,
}


@dataclass(frozen=True)
class DashboardData:
    bangladesh: DistrictCollection
    amphan: StormTrackCollection
    health: FacilityCollection
    education: FacilityCollection
    stats: SummaryStats


async def _fetch_feed(client: httpx.AsyncClient, key: str, path: str):
    LOGGER.debug("Fetching %s feed from %s", key, path)
    try:
        resp = await client.get(path)
        resp.raise_for_status()
        payload = resp.json()
    except httpx.HTTPStatusError as exc:
        raise LoadFailure(key, f"HTTP {exc.response.status_code} from {path}") from exc
    except httpx.HTTPError as exc:
        raise LoadFailure(key, f"request to {path} failed: {exc}") from exc
    except ValueError as exc:
        raise LoadFailure(key, f"unparsable JSON from {path}") from exc
    try:
        return FEED_MODELS[key].model_validate(payload)
    except ValidationError as exc:
        raise LoadFailure(key, f"invalid document ({exc.error_count()} validation errors)") from exc


async def fetch_feeds(
    client: httpx.AsyncClient, paths: Optional[Dict[str, str]] = None
) -> DashboardData:
    """
    Issue the five feed requests concurrently and wait for all of them.
    The first failure aborts the load; results of requests that already
    succeeded are discarded.
    """
    paths = {**FEED_PATHS, **(paths or {})}
    keys = list(FEED_MODELS)
    results = await asyncio.gather(*(_fetch_feed(client, key, paths[key]) for key in keys))
    data = DashboardData(**dict(zip(keys, results)))
    LOGGER.info(
        "Loaded %d districts, %d track points, %d health and %d education facilities.",
        len(data.bangladesh.features),
        len(data.amphan.features),
        len(data.health.features),
        len(data.education.features),
    )
    return data


def load_dashboard_data(
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    paths: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> DashboardData:
    """Blocking entry point: open a client, fetch all feeds, close the client."""

    async def _run() -> DashboardData:
        async with httpx.AsyncClient(
            base_url=base_url or API_BASE,
            transport=transport,
            timeout=HTTP_TIMEOUT if timeout is None else timeout,
        ) as client:
            return await fetch_feeds(client, paths)

    return asyncio.run(_run())
