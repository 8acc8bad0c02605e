"""Configuration loading and validation."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from cube_mm_bot.app.errors import ConfigError

MAKER_FEE = 0.0006
PROFIT_MARGIN = 0.005

URL_MAINNET = "https://api.cube.exchange"
URL_STAGING = "https://staging.cube.exchange"

# Environment variables that override the YAML file.
ENV_OVERRIDES = {
    "API_KEY": ("cube", "api_key"),
    "API_SECRET": ("cube", "api_secret"),
    "SUBACCOUNT_ID": ("cube", "subaccount_id"),
    "CUBE_TESTNET": ("cube", "testnet"),
}


class CubeConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    api_key: str = Field(min_length=1)
    api_secret: str = Field(pattern=r"^[0-9a-fA-F]{64}$")
    subaccount_id: int = Field(ge=0)
    testnet: bool = False

    @property
    def base_url(self) -> str:
        return URL_STAGING if self.testnet else URL_MAINNET


class AssetConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    symbol: str = Field(min_length=1)
    order_size: float = Field(gt=0)
    profit_margin: float = Field(default=PROFIT_MARGIN, ge=0)

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        return value.strip().upper()


class TradingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    maker_fee: float = Field(default=MAKER_FEE, ge=0)
    trade_interval_sec: float = Field(default=10, gt=0)
    report_interval_sec: float = Field(default=30, gt=0)
    request_timeout_sec: float = Field(default=10, gt=0)
    unmatched_sell_policy: str = Field(default="zero_basis", pattern=r"^(zero_basis|skip)$")
    interactive: bool = True


def _default_assets() -> list[AssetConfig]:
    return [
        AssetConfig(symbol="ETH", order_size=1.0),
        AssetConfig(symbol="SOL", order_size=10.0),
    ]


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cube: CubeConfig
    trading: TradingConfig = Field(default_factory=TradingConfig)
    assets: list[AssetConfig] = Field(default_factory=_default_assets, min_length=1)

    @model_validator(mode="after")
    def _check_assets(self) -> "AppConfig":
        seen: set[str] = set()
        for asset in self.assets:
            if asset.symbol in seen:
                raise ValueError(f"duplicate asset symbol {asset.symbol}")
            seen.add(asset.symbol)
            spread = asset.profit_margin + self.trading.maker_fee
            if spread >= 1:
                raise ValueError(f"spread for {asset.symbol} must be below 1, got {spread}")
        return self


def _apply_env_overrides(raw_data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        block = raw_data.setdefault(section, {})
        if not isinstance(block, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        block[key] = value
    return raw_data


def load_config(
    path: str | Path | None = None,
    env_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from YAML file plus environment and validate schema."""
    if environ is None:
        load_dotenv(env_file)
        environ = os.environ

    raw_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(
                f"Config file '{config_path}' not found. Copy config.yml.example to config.yml first."
            )
        try:
            with config_path.open("r", encoding="utf-8") as fh:
                loaded = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config file '{config_path}' is not valid YAML: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file '{config_path}' must contain a mapping")
        raw_data = loaded

    raw_data = _apply_env_overrides(raw_data, environ)
    if "cube" not in raw_data:
        raise ConfigError("API_KEY, API_SECRET and SUBACCOUNT_ID are not set")

    try:
        return AppConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc
