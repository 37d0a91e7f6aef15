"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from marketsettle.storage.deployments import network_key

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration files or values cannot be used."""


class NetworkConfigError(ConfigError):
    """Raised when the selected network cannot be turned into a usable context."""


class NetworkConfig(BaseModel):
    """RPC endpoint and chain id for one named network."""

    rpc_url: str
    chain_id: int = Field(ge=0)


class SettlementConfig(BaseModel):
    """Settlement transaction parameters."""

    receipt_timeout_seconds: float = 120.0
    receipt_poll_seconds: float = 2.0
    request_timeout_seconds: float = 30.0


def _default_networks() -> dict[str, NetworkConfig]:
    return {
        "bscTestnet": NetworkConfig(
            rpc_url="https://bnb-testnet.api.onfinality.io/public",
            chain_id=97,
        ),
    }


class NetworkContext(BaseModel):
    """Everything a settlement run needs to know about the network it targets.

    Built once at the invocation boundary and passed down explicitly, so the
    settlement steps never read process-wide configuration.
    """

    model_config = {"frozen": True}

    name: str
    chain_id: int
    rpc_url: str
    private_key: str = Field(default="", repr=False)

    @property
    def network_key(self) -> str:
        """Deployment registry key: ``<network-name>-<chain-id>``."""
        return network_key(self.name, self.chain_id)


class Settings(BaseSettings):
    """Main configuration class."""

    # Paths
    data_dir: Path = Path("data")
    deployments_path: Path = Path("deployments/addresses.json")

    # Network selection and credentials
    network: str = "bscTestnet"
    evm_private_key: str = ""
    logfire_token: str = ""

    networks: dict[str, NetworkConfig] = Field(default_factory=_default_networks)
    settlement: SettlementConfig = Field(default_factory=SettlementConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    def network_context(self, name: str | None = None) -> NetworkContext:
        """Build the explicit network context for ``name`` (defaults to the selected network)."""
        network_name = name or self.network
        network = self.networks.get(network_name)
        if network is None:
            known = ", ".join(sorted(self.networks)) or "none"
            raise NetworkConfigError(
                f"Unknown network '{network_name}'. Configured networks: {known}"
            )

        return NetworkContext(
            name=network_name,
            chain_id=network.chain_id,
            rpc_url=network.rpc_url,
            private_key=self.evm_private_key.strip(),
        )

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}. Using defaults.")
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            if not isinstance(yaml_config, dict):
                raise ConfigError(
                    f"{config_path} must contain a mapping of sections, "
                    f"got {type(yaml_config).__name__}"
                )

            if "settlement" in yaml_config:
                section_dict = self.settlement.model_dump()
                section_dict.update(yaml_config["settlement"])
                self.settlement = SettlementConfig(**section_dict)

            for network_name, network_values in (yaml_config.get("networks") or {}).items():
                current = self.networks.get(network_name)
                merged = current.model_dump() if current else {}
                merged.update(network_values or {})
                self.networks[network_name] = NetworkConfig(**merged)

            if "deployments_path" in yaml_config:
                self.deployments_path = Path(yaml_config["deployments_path"])

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise ConfigError(f"Failed to parse {config_path}: {e}") from e
        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
