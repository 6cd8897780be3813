"""
Endpoint health probing.

Probing is advisory: an endpoint that fails the probe is reported and
skipped, but if every endpoint fails the caller falls back to the full
configured list rather than giving up without trying.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..errors import DecodeError, RpcError
from .endpoints import Endpoint
from .rpc import RpcClient, get_block_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointHealth:
    endpoint: Endpoint
    healthy: bool
    detail: str = ""


def check_health(client: RpcClient, endpoint: Endpoint) -> EndpointHealth:
    """Classify one endpoint with an ``eth_blockNumber`` call."""
    try:
        block = get_block_number(client, endpoint.url)
    except (RpcError, DecodeError) as exc:
        logger.warning("%s endpoint check failed: %s", endpoint.name, exc)
        return EndpointHealth(endpoint, healthy=False, detail=str(exc))
    return EndpointHealth(endpoint, healthy=True, detail=f"block {block}")


def probe(client: RpcClient, endpoints: Iterable[Endpoint]) -> list[Endpoint]:
    """Return the healthy endpoints, in configured order."""
    healthy = []
    for endpoint in endpoints:
        logger.info("Checking health of %s...", endpoint.name)
        if check_health(client, endpoint).healthy:
            logger.info("%s is healthy", endpoint.name)
            healthy.append(endpoint)
        else:
            logger.warning("%s appears to be unhealthy, may skip", endpoint.name)
    return healthy


def candidate_endpoints(
    endpoints: Sequence[Endpoint],
    healthy: Sequence[Endpoint],
) -> list[Endpoint]:
    """Endpoints to submit through: the healthy ones, or all of them if none are."""
    if healthy:
        return list(healthy)
    logger.warning("No endpoint passed the health check; trying all %d anyway", len(endpoints))
    return list(endpoints)
