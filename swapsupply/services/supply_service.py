import logging
from typing import Optional

from ..adapters.aave_v3 import AaveV3Adapter
from ..domain.models import TokenDescriptor, TransactionReceipt
from .exceptions import SupplyError
from .tx_service import TxService


class SupplyStep:
    """
    Deposits into the lending pool. Needs an allowance for the pool set
    beforehand; that ordering is the caller's job.
    """

    def __init__(
        self,
        tx: TxService,
        lending: AaveV3Adapter,
        referral_code: int = 0,
        logger: Optional[logging.Logger] = None,
    ):
        self._tx = tx
        self._lending = lending
        self._referral_code = referral_code
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def supply(self, token: TokenDescriptor, amount_raw: int, on_behalf_of: str) -> TransactionReceipt:
        self._logger.info(
            "Supplying %s raw of %s to %s on behalf of %s",
            amount_raw, token.address, self._lending.pool, on_behalf_of,
        )
        try:
            fn = self._lending.fn_supply(token.address, amount_raw, on_behalf_of, self._referral_code)
            return self._tx.send(fn, label="supply")
        except Exception as exc:
            raise SupplyError(f"Supply failed for {token.address}: {exc}", cause=exc) from exc
