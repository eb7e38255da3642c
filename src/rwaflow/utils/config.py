"""
Environment-driven application configuration.

Values are read from the process environment (optionally populated from a
``.env`` file via python-dotenv) into a Pydantic ``AppConfig``.  Required
variables are checked eagerly so that a misconfigured deployment fails at
startup rather than mid-transaction.

Required variables::

    RPC_URL, PRIVATE_KEY,
    CONTRACT_ADDRESS_RWA_FACTORY, CONTRACT_ADDRESS_PYTH_ORACLE_READER,
    PRICE_FEED_ETH_USD

Optional: PYTH_API_URL, CHAIN_ID, TESTNET_CHAIN_IDS, PAYMENT_SCALE_FACTOR,
PAYMENT_PRECISION, PRICE_FEED_BTC_USD, PRICE_FEED_USDC_USD
"""
import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from src.rwaflow.core.errors import ConfigError

# Mantle Sepolia.
DEFAULT_CHAIN_ID = 5003
DEFAULT_PYTH_API_URL = "https://hermes.pyth.network"


class ContractAddresses(BaseModel):
    rwa_factory: str
    pyth_oracle_reader: str


class PriceFeeds(BaseModel):
    eth_usd: str
    btc_usd: Optional[str] = None
    usdc_usd: Optional[str] = None

    def all(self) -> List[str]:
        return [f for f in (self.eth_usd, self.btc_usd, self.usdc_usd) if f]


class PythConfig(BaseModel):
    api_url: str
    price_feeds: PriceFeeds
    timeout_seconds: float = Field(10.0, gt=0)

    @property
    def default_feed_id(self) -> str:
        return self.price_feeds.eth_usd


class PaymentConfig(BaseModel):
    """Fiat → native payment conversion policy (testnet placeholder)."""

    scale_factor: int = Field(
        1_000_000, gt=0,
        description="Divisor applied to fiat minor units to obtain native coins",
    )
    precision: int = Field(
        6, ge=0, le=18,
        description="Fractional digits kept before converting to the smallest unit",
    )
    native_decimals: int = Field(18, ge=0)


class AppConfig(BaseModel):
    rpc_url: str
    chain_id: int = DEFAULT_CHAIN_ID
    private_key: str
    contracts: ContractAddresses
    pyth: PythConfig
    payment: PaymentConfig = Field(default_factory=PaymentConfig)
    testnet_chain_ids: List[int] = Field(default_factory=lambda: [DEFAULT_CHAIN_ID])

    @property
    def is_testnet(self) -> bool:
        return self.chain_id in self.testnet_chain_ids


def _require(env: Mapping[str, str], key: str, default: Optional[str] = None) -> str:
    value = env.get(key) or default
    if not value:
        logger.critical(f"Missing required environment variable: {key}")
        raise ConfigError(f"Environment variable {key} is required but not set")
    return value


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"Environment variable {key} must be an integer, got {raw!r}") from e


def _int_list(env: Mapping[str, str], key: str, default: List[int]) -> List[int]:
    raw = env.get(key)
    if not raw:
        return default
    try:
        return [int(x) for x in raw.split(",") if x.strip()]
    except ValueError as e:
        raise ConfigError(f"Environment variable {key} must be a comma-separated list of integers") from e


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build the application config from *env* (defaults to ``os.environ``).

    Raises:
        ConfigError: If a required variable is missing or malformed.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    try:
        config = AppConfig(
            rpc_url=_require(env, "RPC_URL"),
            chain_id=_int(env, "CHAIN_ID", DEFAULT_CHAIN_ID),
            private_key=_require(env, "PRIVATE_KEY"),
            contracts=ContractAddresses(
                rwa_factory=_require(env, "CONTRACT_ADDRESS_RWA_FACTORY"),
                pyth_oracle_reader=_require(env, "CONTRACT_ADDRESS_PYTH_ORACLE_READER"),
            ),
            pyth=PythConfig(
                api_url=_require(env, "PYTH_API_URL", DEFAULT_PYTH_API_URL),
                price_feeds=PriceFeeds(
                    eth_usd=_require(env, "PRICE_FEED_ETH_USD"),
                    btc_usd=env.get("PRICE_FEED_BTC_USD"),
                    usdc_usd=env.get("PRICE_FEED_USDC_USD"),
                ),
            ),
            payment=PaymentConfig(
                scale_factor=_int(env, "PAYMENT_SCALE_FACTOR", 1_000_000),
                precision=_int(env, "PAYMENT_PRECISION", 6),
            ),
            testnet_chain_ids=_int_list(env, "TESTNET_CHAIN_IDS", [DEFAULT_CHAIN_ID]),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info(
        f"Configuration loaded. Chain: {config.chain_id} "
        f"| Testnet: {config.is_testnet}"
    )
    return config
