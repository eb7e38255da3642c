"""Tests for environment-driven configuration."""
import pytest

from src.rwaflow.core.errors import ConfigError
from src.rwaflow.utils.config import DEFAULT_CHAIN_ID, load_config

BASE_ENV = {
    "RPC_URL": "https://rpc.sepolia.mantle.xyz",
    "PRIVATE_KEY": "0x" + "11" * 32,
    "CONTRACT_ADDRESS_RWA_FACTORY": "0x" + "22" * 20,
    "CONTRACT_ADDRESS_PYTH_ORACLE_READER": "0x" + "33" * 20,
    "PRICE_FEED_ETH_USD": "0x" + "ff" * 32,
}


def test_defaults():
    config = load_config(dict(BASE_ENV))

    assert config.chain_id == DEFAULT_CHAIN_ID
    assert config.is_testnet
    assert config.pyth.api_url == "https://hermes.pyth.network"
    assert config.pyth.default_feed_id == BASE_ENV["PRICE_FEED_ETH_USD"]
    assert config.payment.scale_factor == 1_000_000
    assert config.payment.precision == 6


def test_overrides():
    env = dict(
        BASE_ENV,
        CHAIN_ID="5000",
        PAYMENT_SCALE_FACTOR="100",
        PAYMENT_PRECISION="2",
        PRICE_FEED_BTC_USD="0x" + "aa" * 32,
    )

    config = load_config(env)

    assert config.chain_id == 5000
    assert not config.is_testnet
    assert config.payment.scale_factor == 100
    assert config.pyth.price_feeds.all() == [env["PRICE_FEED_ETH_USD"], env["PRICE_FEED_BTC_USD"]]


@pytest.mark.parametrize("missing", ["RPC_URL", "PRIVATE_KEY", "CONTRACT_ADDRESS_RWA_FACTORY", "PRICE_FEED_ETH_USD"])
def test_missing_required_variable(missing):
    env = {k: v for k, v in BASE_ENV.items() if k != missing}

    with pytest.raises(ConfigError, match=missing):
        load_config(env)


def test_malformed_integer():
    with pytest.raises(ConfigError, match="CHAIN_ID"):
        load_config(dict(BASE_ENV, CHAIN_ID="mantle"))


def test_zero_scale_factor_rejected():
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(dict(BASE_ENV, PAYMENT_SCALE_FACTOR="0"))


def test_testnet_list():
    config = load_config(dict(BASE_ENV, CHAIN_ID="31337", TESTNET_CHAIN_IDS="5003, 31337"))

    assert config.testnet_chain_ids == [5003, 31337]
    assert config.is_testnet
