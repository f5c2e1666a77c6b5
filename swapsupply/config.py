import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3

from .domain.models import TokenDescriptor
from .services.exceptions import ConfigError, MissingSettingError

load_dotenv()

# Mainnet defaults; every one of them can be overridden from the environment.
DEFAULT_TOKEN_IN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eb48"   # USDC
DEFAULT_TOKEN_IN_DECIMALS = 6
DEFAULT_TOKEN_OUT = "0x514910771AF9Ca656af840dff83E8264EcF986CA"  # LINK
DEFAULT_TOKEN_OUT_DECIMALS = 18
DEFAULT_UNI_V3_ROUTER = "0x68b3465833fb72A70ecDF485E0e4C7bD8665Fc45"   # SwapRouter02
DEFAULT_UNI_V3_FACTORY = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
DEFAULT_LENDING_POOL = "0x87870Bca3F3fD6335C3F4ce8392D69350B4fA4E2"    # Aave V3 Pool
DEFAULT_POOL_FEE_TIER = 3000


@dataclass
class Settings:
    # signing / chain
    RPC_URL: str
    PRIVATE_KEY: str  # hex 0x...

    # tokens
    TOKEN_IN_ADDRESS: str
    TOKEN_IN_DECIMALS: int
    TOKEN_OUT_ADDRESS: str
    TOKEN_OUT_DECIMALS: int

    # protocol contracts
    UNI_V3_ROUTER: str
    UNI_V3_FACTORY: str
    LENDING_POOL: str
    POOL_FEE_TIER: int = DEFAULT_POOL_FEE_TIER
    REFERRAL_CODE: int = 0

    # None = wait for receipts forever
    RECEIPT_TIMEOUT_SEC: Optional[float] = None


def _required(name: str) -> str:
    value = (os.environ.get(name) or "").strip()
    if not value:
        raise MissingSettingError(name)
    return value


def _int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _optional_float(name: str) -> Optional[float]:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def _address(name: str, default: str) -> str:
    raw = (os.environ.get(name) or "").strip() or default
    try:
        return Web3.to_checksum_address(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} is not a valid address: {raw!r}") from None


def _private_key(name: str) -> str:
    raw = _required(name)
    try:
        Account.from_key(raw)
    except Exception:
        # never echo the key itself
        raise ConfigError(f"{name} is not a valid 32-byte hex private key") from None
    return raw


@lru_cache()
def get_settings() -> Settings:
    return Settings(
        RPC_URL=_required("RPC_URL"),
        PRIVATE_KEY=_private_key("PRIVATE_KEY"),

        TOKEN_IN_ADDRESS=_address("TOKEN_IN_ADDRESS", DEFAULT_TOKEN_IN),
        TOKEN_IN_DECIMALS=_int("TOKEN_IN_DECIMALS", DEFAULT_TOKEN_IN_DECIMALS),
        TOKEN_OUT_ADDRESS=_address("TOKEN_OUT_ADDRESS", DEFAULT_TOKEN_OUT),
        TOKEN_OUT_DECIMALS=_int("TOKEN_OUT_DECIMALS", DEFAULT_TOKEN_OUT_DECIMALS),

        UNI_V3_ROUTER=_address("UNI_V3_ROUTER", DEFAULT_UNI_V3_ROUTER),
        UNI_V3_FACTORY=_address("UNI_V3_FACTORY", DEFAULT_UNI_V3_FACTORY),
        LENDING_POOL=_address("LENDING_POOL", DEFAULT_LENDING_POOL),
        POOL_FEE_TIER=_int("POOL_FEE_TIER", DEFAULT_POOL_FEE_TIER),
        REFERRAL_CODE=_int("REFERRAL_CODE", 0),

        RECEIPT_TIMEOUT_SEC=_optional_float("RECEIPT_TIMEOUT_SEC"),
    )


@dataclass(frozen=True)
class PipelineConfig:
    """
    Deployment constants for one swap -> supply pair. Immutable and passed
    into the use case, so several pairs/chains can be driven from one process.
    """
    token_in: TokenDescriptor
    token_out: TokenDescriptor
    router: str
    factory: str
    lending_pool: str
    fee_tier: int = DEFAULT_POOL_FEE_TIER
    referral_code: int = 0

    def __post_init__(self):
        for name in ("router", "factory", "lending_pool"):
            object.__setattr__(self, name, Web3.to_checksum_address(getattr(self, name)))

    @classmethod
    def from_settings(cls, s: Settings) -> "PipelineConfig":
        try:
            return cls(
                token_in=TokenDescriptor(address=s.TOKEN_IN_ADDRESS, decimals=s.TOKEN_IN_DECIMALS),
                token_out=TokenDescriptor(address=s.TOKEN_OUT_ADDRESS, decimals=s.TOKEN_OUT_DECIMALS),
                router=s.UNI_V3_ROUTER,
                factory=s.UNI_V3_FACTORY,
                lending_pool=s.LENDING_POOL,
                fee_tier=s.POOL_FEE_TIER,
                referral_code=s.REFERRAL_CODE,
            )
        except ValueError as e:
            # pydantic ValidationError is a ValueError (e.g. decimals out of range)
            raise ConfigError(f"invalid pipeline configuration: {e}") from e
