"""Deployment resolution: network context to market contract address."""

import logging
from pathlib import Path

from marketsettle.config import NetworkContext
from marketsettle.storage.deployments import get_deployment, load_registry

from .exceptions import (
    InvalidDeploymentRecordError,
    MarketNotDeployedError,
    NoDeploymentForNetworkError,
    NoDeploymentRegistryError,
)

logger = logging.getLogger(__name__)


def resolve_market_address(context: NetworkContext, registry_path: Path) -> str:
    """Look up the market address recorded for ``context``'s network key.

    Touches only the registry file, never the chain.
    """
    key = context.network_key

    try:
        registry = load_registry(registry_path)
    except FileNotFoundError as e:
        raise NoDeploymentRegistryError(
            f"No deployments found at {registry_path}. Please deploy contracts first."
        ) from e
    except ValueError as e:
        raise InvalidDeploymentRecordError(
            f"Deployment registry {registry_path} is unreadable: {e}"
        ) from e

    try:
        record = get_deployment(registry, key)
    except ValueError as e:
        raise InvalidDeploymentRecordError(
            f"Deployment record for {key} is malformed: {e}"
        ) from e

    if record is None:
        raise NoDeploymentForNetworkError(
            f"No deployment found for network {key}", network_key=key
        )

    if not record.market_address:
        raise MarketNotDeployedError(
            f"Market contract not deployed on {key}. "
            "Please deploy with the --deployMarket flag."
        )

    logger.info(f"Resolved market for {key}: {record.market_address}")
    return record.market_address
