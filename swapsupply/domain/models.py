from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator
from web3 import Web3


def _checksum(v: str) -> str:
    return Web3.to_checksum_address(v)


class TokenDescriptor(BaseModel):
    """ERC20 the pipeline touches; decimals converts human amounts to base units."""
    model_config = ConfigDict(frozen=True)

    address: str
    decimals: int

    @field_validator("address")
    @classmethod
    def _check_address(cls, v: str) -> str:
        return _checksum(v)

    @field_validator("decimals")
    @classmethod
    def _check_decimals(cls, v: int) -> int:
        if v < 0 or v > 77:
            raise ValueError("decimals must be within 0..77")
        return v


class PoolDescriptor(BaseModel):
    """
    Pool returned by the factory for one run. token0/token1 are in the
    pool's own order (lower address first), not the caller's.
    """
    model_config = ConfigDict(frozen=True)

    pool_address: str
    token0: str
    token1: str
    fee_tier: int

    @field_validator("pool_address", "token0", "token1")
    @classmethod
    def _check_addresses(cls, v: str) -> str:
        return _checksum(v)

    def has_token(self, addr: str) -> bool:
        a = _checksum(addr)
        return a in (self.token0, self.token1)


class SwapParameters(BaseModel):
    """exactInputSingle params for SwapRouter02 (no deadline field)."""
    model_config = ConfigDict(frozen=True)

    token_in: str
    token_out: str
    fee: int
    recipient: str
    amount_in: int
    amount_out_minimum: int = 0
    price_limit: int = 0  # sqrtPriceLimitX96

    @field_validator("token_in", "token_out", "recipient")
    @classmethod
    def _check_addresses(cls, v: str) -> str:
        return _checksum(v)

    def as_tuple(self) -> Tuple[str, str, int, str, int, int, int]:
        # struct order of IV3SwapRouter.ExactInputSingleParams
        return (
            self.token_in,
            self.token_out,
            int(self.fee),
            self.recipient,
            int(self.amount_in),
            int(self.amount_out_minimum),
            int(self.price_limit),
        )


class TransactionReceipt(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    status: int
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == 1
