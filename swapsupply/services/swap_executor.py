import logging
from typing import Optional

from ..adapters.uniswap_v3 import UniswapV3Adapter
from ..domain.models import PoolDescriptor, SwapParameters, TokenDescriptor, TransactionReceipt
from .exceptions import SwapExecutionError
from .tx_service import TxService


def build_swap_parameters(
    pool: PoolDescriptor,
    token_in: TokenDescriptor,
    token_out: TokenDescriptor,
    recipient: str,
    amount_in_raw: int,
) -> SwapParameters:
    """
    Single-hop exact-in params. The fee comes from the resolved pool.

    amountOutMinimum and sqrtPriceLimitX96 are both 0: the swap takes whatever
    price the pool gives, there is no slippage or price bound.
    """
    return SwapParameters(
        token_in=token_in.address,
        token_out=token_out.address,
        fee=pool.fee_tier,
        recipient=recipient,
        amount_in=int(amount_in_raw),
        amount_out_minimum=0,
        price_limit=0,
    )


class SwapExecutor:
    def __init__(self, tx: TxService, uni: UniswapV3Adapter, logger: Optional[logging.Logger] = None):
        self._tx = tx
        self._uni = uni
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def execute_swap(self, params: SwapParameters) -> TransactionReceipt:
        self._logger.info(
            "Swapping %s raw %s -> %s (fee=%s, min_out=%s) via %s",
            params.amount_in, params.token_in, params.token_out,
            params.fee, params.amount_out_minimum, self._uni.router,
        )
        try:
            fn = self._uni.fn_exact_input_single(params)
            return self._tx.send(fn, label="swap")
        except Exception as exc:
            raise SwapExecutionError(f"Swap failed: {exc}", cause=exc) from exc
