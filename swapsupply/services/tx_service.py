import logging
from typing import Optional

from eth_account import Account
from web3 import Web3
from web3.contract.contract import ContractFunction

from ..config import Settings
from ..domain.models import TransactionReceipt
from .exceptions import TransactionRevertedError
from .utils import to_json_safe


class TxService:
    """
    Transaction sender bound to one signing wallet.

    Responsibilities:
    - Build, sign and broadcast contract calls.
    - Wait for the receipt (no timeout unless `receipt_timeout` is set).
    - Raise TransactionRevertedError when the tx is mined with status == 0.

    One run at a time per wallet: nonces are read from the node right before
    each build, so two concurrent senders on the same key would collide.
    """

    def __init__(
        self,
        w3: Web3,
        private_key: str,
        receipt_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.w3 = w3
        self.pk = private_key
        self.account = Account.from_key(private_key)
        self.receipt_timeout = receipt_timeout
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_settings(cls, s: Settings) -> "TxService":
        w3 = Web3(Web3.HTTPProvider(s.RPC_URL))
        return cls(w3, s.PRIVATE_KEY, receipt_timeout=s.RECEIPT_TIMEOUT_SEC)

    def sender_address(self) -> str:
        return self.account.address

    # ---------- internal helpers ----------

    def _next_nonce(self) -> int:
        return self.w3.eth.get_transaction_count(self.account.address)

    def _finalize_fee_fields(self, tx: dict) -> dict:
        """
        If build_transaction didn't produce EIP-1559 style fields, fallback to legacy gasPrice.
        """
        if "maxFeePerGas" in tx or "maxPriorityFeePerGas" in tx:
            return tx
        if "gasPrice" not in tx:
            tx["gasPrice"] = self.w3.eth.gas_price
        return tx

    def _build_tx_dict(self, fn: ContractFunction, value_wei: int) -> dict:
        base_tx = {
            "from":  self.account.address,
            "nonce": self._next_nonce(),
            "value": int(value_wei or 0),
        }
        return fn.build_transaction(base_tx)

    def _sign_and_send(self, tx: dict) -> str:
        signed = self.w3.eth.account.sign_transaction(tx, self.pk)
        txh = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(txh)

    def _wait_receipt(self, tx_hash: str) -> dict:
        rcpt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        return dict(rcpt)

    # ---------- public API ----------

    def send(self, fn: ContractFunction, *, label: str = "tx", value: int = 0) -> TransactionReceipt:
        """
        Broadcasts a state-changing contract call and blocks until it is mined.

        Args:
            fn: Already-parameterized ContractFunction from web3.py
            label: Short name used in the sent/confirmed log lines
            value: ETH value (wei) to send along with the call

        Raises:
            TransactionRevertedError: mined with status == 0.
            Any web3 / RPC error from build, broadcast or the receipt wait
            (including web3's TimeExhausted when receipt_timeout is set).
        """
        tx = self._build_tx_dict(fn, value_wei=value)
        tx = self._finalize_fee_fields(tx)

        tx_hash = self._sign_and_send(tx)
        self._logger.info("%s transaction sent: %s", label, tx_hash)

        rcpt = self._wait_receipt(tx_hash)
        status = int(rcpt.get("status", 0))

        if status == 0:
            raise TransactionRevertedError(
                tx_hash=tx_hash,
                receipt=to_json_safe(rcpt),
                msg=f"{label} transaction reverted (status=0): {tx_hash}",
            )

        block = rcpt.get("blockNumber")
        self._logger.info("%s transaction confirmed: %s (block %s)", label, tx_hash, block)
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=status,
            block_number=int(block) if block is not None else None,
            gas_used=int(rcpt["gasUsed"]) if rcpt.get("gasUsed") is not None else None,
        )
