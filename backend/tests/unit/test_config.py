"""
Unit Tests: Configuration

Test cases:
- Defaults and the bundled bscTestnet network
- Network context construction
- YAML overlay merging
- Environment variable overrides
"""

import pytest

from marketsettle.config import ConfigError, NetworkConfigError, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("NETWORK", "EVM_PRIVATE_KEY", "LOGFIRE_TOKEN", "SETTLEMENT__RECEIPT_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)


def make_settings(tmp_path, **values) -> Settings:
    return Settings(_env_file=None, data_dir=tmp_path, **values)


def test_defaults(tmp_path):
    settings = make_settings(tmp_path)

    assert settings.network == "bscTestnet"
    assert settings.networks["bscTestnet"].chain_id == 97
    assert settings.settlement.receipt_timeout_seconds == 120.0
    assert settings.data_dir.is_absolute()


def test_network_context_for_selected_network(tmp_path):
    settings = make_settings(tmp_path, evm_private_key=" 0xabc \n")
    context = settings.network_context()

    assert context.network_key == "bscTestnet-97"
    assert context.rpc_url == "https://bnb-testnet.api.onfinality.io/public"
    assert context.private_key == "0xabc"


def test_network_context_hides_private_key(tmp_path):
    context = make_settings(tmp_path, evm_private_key="0xsecret").network_context()
    assert "0xsecret" not in repr(context)


def test_network_context_without_key(tmp_path):
    assert make_settings(tmp_path).network_context().private_key == ""


def test_unknown_network(tmp_path):
    settings = make_settings(tmp_path)
    with pytest.raises(NetworkConfigError, match="mainnet"):
        settings.network_context("mainnet")


def test_yaml_overlay(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "settlement:\n"
        "  receipt_timeout_seconds: 300\n"
        "networks:\n"
        "  mainnet:\n"
        "    rpc_url: http://localhost:8545\n"
        "    chain_id: 1\n"
        "  bscTestnet:\n"
        "    rpc_url: http://localhost:9545\n"
        "deployments_path: /srv/deployments/addresses.json\n"
    )
    settings = make_settings(tmp_path)
    settings.load_yaml_config()

    assert settings.settlement.receipt_timeout_seconds == 300
    assert settings.settlement.receipt_poll_seconds == 2.0
    assert settings.network_context("mainnet").network_key == "mainnet-1"
    assert settings.networks["bscTestnet"].rpc_url == "http://localhost:9545"
    assert settings.networks["bscTestnet"].chain_id == 97
    assert str(settings.deployments_path) == "/srv/deployments/addresses.json"


def test_missing_yaml_keeps_defaults(tmp_path):
    settings = make_settings(tmp_path)
    settings.load_yaml_config()
    assert set(settings.networks) == {"bscTestnet"}


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("NETWORK", "mainnet")
    monkeypatch.setenv("EVM_PRIVATE_KEY", "0x" + "22" * 32)
    monkeypatch.setenv("SETTLEMENT__RECEIPT_TIMEOUT_SECONDS", "45")

    settings = make_settings(tmp_path)

    assert settings.network == "mainnet"
    assert settings.evm_private_key == "0x" + "22" * 32
    assert settings.settlement.receipt_timeout_seconds == 45.0
    with pytest.raises(NetworkConfigError):
        settings.network_context()


def test_yaml_must_be_a_mapping(tmp_path):
    (tmp_path / "config.yaml").write_text("- bscTestnet\n- mainnet\n")
    settings = make_settings(tmp_path)

    with pytest.raises(ConfigError, match="mapping"):
        settings.load_yaml_config()


def test_unparseable_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("settlement: [unclosed\n")
    settings = make_settings(tmp_path)

    with pytest.raises(ConfigError):
        settings.load_yaml_config()


def test_unknown_network_is_a_config_error(tmp_path):
    with pytest.raises(ConfigError):
        make_settings(tmp_path).network_context("mainnet")
