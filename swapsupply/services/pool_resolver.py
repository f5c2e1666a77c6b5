import logging
from typing import Optional

from ..adapters.uniswap_v3 import UniswapV3Adapter
from ..domain.models import PoolDescriptor, TokenDescriptor
from .exceptions import PoolNotFoundError, QueryError
from .utils import is_zero_address


class PoolResolver:
    """Looks up the v3 pool for a pair + fee tier. Read-only, nothing is cached."""

    def __init__(self, uni: UniswapV3Adapter, logger: Optional[logging.Logger] = None):
        self._uni = uni
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def resolve_pool(self, token_a: TokenDescriptor, token_b: TokenDescriptor, fee_tier: int) -> PoolDescriptor:
        try:
            pool_addr = self._uni.get_pool(token_a.address, token_b.address, fee_tier)
        except Exception as exc:
            raise QueryError(f"factory.getPool failed: {exc}", cause=exc) from exc

        if is_zero_address(pool_addr):
            raise PoolNotFoundError(token_a.address, token_b.address, fee_tier)

        try:
            t0, t1, fee = self._uni.pool_tokens_and_fee(pool_addr)
            pool = PoolDescriptor(pool_address=pool_addr, token0=t0, token1=t1, fee_tier=fee)
        except Exception as exc:
            raise QueryError(f"pool metadata read failed for {pool_addr}: {exc}", cause=exc) from exc

        if not (pool.has_token(token_a.address) and pool.has_token(token_b.address)):
            raise QueryError(f"pool {pool_addr} holds {t0}/{t1}, not {token_a.address}/{token_b.address}")
        self._logger.info("Resolved pool %s (token0=%s token1=%s fee=%s)", pool.pool_address, t0, t1, fee)
        return pool
