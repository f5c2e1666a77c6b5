from typing import Optional


class ConfigError(RuntimeError):
    """Environment setting is missing or cannot be parsed."""


class MissingSettingError(ConfigError):
    """Required environment setting (RPC_URL, PRIVATE_KEY, ...) is absent or empty."""
    def __init__(self, name: str):
        super().__init__(f"{name} is not set")
        self.name = name


class TransactionRevertedError(Exception):
    """
    Raised when the tx was actually sent on-chain, mined, and status == 0.
    You ALREADY paid gas, the chain executed and reverted.
    """
    def __init__(self, tx_hash: str, receipt: dict, msg: str):
        super().__init__(msg)
        self.tx_hash = tx_hash
        self.receipt = receipt
        self.msg = msg


class PipelineError(Exception):
    """
    Base class for every step failure of the swap -> supply pipeline.

    `step` names the pipeline state the failure happened in and `cause`
    keeps the underlying web3 / RPC / revert error (also chained via
    `raise ... from`).
    """
    step = "unknown"

    def __init__(self, msg: str, cause: Optional[BaseException] = None):
        super().__init__(msg)
        self.msg = msg
        self.cause = cause

    @property
    def tx_hash(self) -> Optional[str]:
        return getattr(self.cause, "tx_hash", None)


class ApprovalError(PipelineError):
    step = "approve"


class PoolNotFoundError(PipelineError):
    """Factory returned the zero address: no pool for this pair + fee tier."""
    step = "resolve_pool"

    def __init__(self, token_a: str, token_b: str, fee_tier: int):
        super().__init__(f"No pool for {token_a}/{token_b} at fee tier {fee_tier}")
        self.token_a = token_a
        self.token_b = token_b
        self.fee_tier = fee_tier


class SwapExecutionError(PipelineError):
    step = "swap"


class QueryError(PipelineError):
    step = "query"


class SupplyError(PipelineError):
    step = "supply"
