"""Deployment registry reader.

The registry is a JSON object keyed by ``<network-name>-<chain-id>``. Each
value is the record the deploy task wrote for that network, for example::

    {
      "bscTestnet-97": {
        "priceFeedAddress": "0x...",
        "myMarketAddress": "0x..."
      }
    }
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3

logger = logging.getLogger(__name__)


class DeploymentRecord(BaseModel):
    """One network's entry in the deployment registry."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    network_key: str
    market_address: str | None = Field(default=None, alias="myMarketAddress")

    @field_validator("market_address", mode="before")
    @classmethod
    def checksum_market_address(cls, v: Any) -> str | None:
        if v is None or v == "":
            return None
        if not isinstance(v, str) or not Web3.is_address(v):
            raise ValueError(f"not a valid contract address: {v!r}")
        return Web3.to_checksum_address(v)


def network_key(network_name: str, chain_id: int) -> str:
    """Compose the registry key for a network."""
    return f"{network_name}-{chain_id}"


def load_registry(path: Path) -> dict[str, Any]:
    """Read the raw registry mapping.

    Raises:
        FileNotFoundError: No registry file at ``path``.
        ValueError: The file is not a JSON object.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Deployment registry not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Deployment registry must be a JSON object: {path}")

    logger.debug(f"Loaded {len(data)} deployment record(s) from {path}")
    return data


def get_deployment(registry: dict[str, Any], key: str) -> DeploymentRecord | None:
    """Validate and return the record for ``key``, or None if absent."""
    raw = registry.get(key)
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Deployment record for {key} must be a JSON object")
    return DeploymentRecord.model_validate({**raw, "network_key": key})
