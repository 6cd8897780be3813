"""
Gas limit estimation.

Estimation is best effort: any failure falls back to a fixed default,
and estimates above a fixed ceiling are capped so a misbehaving
endpoint cannot inflate the limit.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import DecodeError, RpcError, RevertError
from .endpoints import Endpoint
from .rpc import RpcClient, estimate_gas

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 100_000
GAS_LIMIT_CEILING = 500_000


def estimate_gas_limit(
    client: RpcClient,
    endpoint: Endpoint,
    from_address: str,
    to: str,
    data: str,
    label: Optional[str] = None,
) -> int:
    """
    Estimate the gas limit for a call through ``endpoint``.

    Args:
        client: RPC client
        endpoint: Endpoint to ask
        from_address: Sender address
        to: Contract address
        data: 0x-prefixed calldata
        label: Log prefix naming the attempt (default: the endpoint name)

    Returns:
        Gas limit, never more than ``GAS_LIMIT_CEILING``
    """
    label = label or endpoint.name
    logger.info("Estimating gas...")
    try:
        estimate = estimate_gas(
            client,
            endpoint.url,
            {"from": from_address, "to": to, "data": data},
        )
    except RevertError as exc:
        logger.warning(
            "%s: gas estimation reverted: %s. Using default: %d",
            label, exc.reason or exc, DEFAULT_GAS_LIMIT,
        )
        return DEFAULT_GAS_LIMIT
    except (RpcError, DecodeError) as exc:
        logger.warning(
            "%s: gas estimation failed: %s. Using default: %d",
            label, exc, DEFAULT_GAS_LIMIT,
        )
        return DEFAULT_GAS_LIMIT

    if estimate <= 0:
        logger.warning(
            "%s: non-positive gas estimate (%d). Using default: %d",
            label, estimate, DEFAULT_GAS_LIMIT,
        )
        return DEFAULT_GAS_LIMIT

    if estimate > GAS_LIMIT_CEILING:
        logger.warning(
            "%s: estimated %d gas, above the %d ceiling. Capping.",
            label, estimate, GAS_LIMIT_CEILING,
        )
        return GAS_LIMIT_CEILING

    logger.info("Estimated gas: %d", estimate)
    return estimate
