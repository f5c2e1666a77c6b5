import logging
from decimal import Decimal
from typing import Optional, Union

from ..adapters.erc20 import ERC20Adapter
from ..domain.models import TokenDescriptor, TransactionReceipt
from .exceptions import ApprovalError
from .tx_service import TxService
from .utils import to_base_units


class TokenApprovalStep:
    """
    Grants `spender` an ERC20 allowance from the wallet held by `tx`.

    The approval either lands fully or not at all (reverted / never mined),
    so a failure leaves no partial allowance behind.
    """

    def __init__(self, tx: TxService, erc20: ERC20Adapter, logger: Optional[logging.Logger] = None):
        self._tx = tx
        self._erc20 = erc20
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def approve(
        self,
        token: TokenDescriptor,
        spender: str,
        human_amount: Union[Decimal, int, str],
    ) -> TransactionReceipt:
        """Approve `human_amount` (token units, e.g. 1.5 USDC) for `spender`."""
        amount_raw = to_base_units(human_amount, token.decimals)
        return self.approve_raw(token, spender, amount_raw)

    def approve_raw(self, token: TokenDescriptor, spender: str, amount_raw: int) -> TransactionReceipt:
        self._logger.info("Approving %s raw of %s for spender %s", amount_raw, token.address, spender)
        try:
            fn = self._erc20.fn_approve(token.address, spender, amount_raw)
            return self._tx.send(fn, label="approval")
        except Exception as exc:
            raise ApprovalError(f"Token approval failed for {token.address}: {exc}", cause=exc) from exc
