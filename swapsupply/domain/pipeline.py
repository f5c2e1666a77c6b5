from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ..services.exceptions import PipelineError
from ..services.utils import to_json_safe
from .models import PoolDescriptor, SwapParameters, TransactionReceipt

T = TypeVar("T")


class PipelineState(str, Enum):
    """
    Lifecycle of one swap -> supply run.
    """
    IDLE = "IDLE"
    APPROVING_SWAP = "APPROVING_SWAP"       # token_in.approve(router)
    RESOLVING_POOL = "RESOLVING_POOL"       # factory.getPool + pool metadata
    SWAPPING = "SWAPPING"                   # router.exactInputSingle
    READING_BALANCE = "READING_BALANCE"     # token_out.balanceOf(wallet)
    APPROVING_SUPPLY = "APPROVING_SUPPLY"   # token_out.approve(lending pool)
    SUPPLYING = "SUPPLYING"                 # lendingPool.supply
    DONE = "DONE"
    FAILED = "FAILED"


# happy path
NEXT_STATE: Dict[PipelineState, PipelineState] = {
    PipelineState.IDLE: PipelineState.APPROVING_SWAP,
    PipelineState.APPROVING_SWAP: PipelineState.RESOLVING_POOL,
    PipelineState.RESOLVING_POOL: PipelineState.SWAPPING,
    PipelineState.SWAPPING: PipelineState.READING_BALANCE,
    PipelineState.READING_BALANCE: PipelineState.APPROVING_SUPPLY,
    PipelineState.APPROVING_SUPPLY: PipelineState.SUPPLYING,
    PipelineState.SUPPLYING: PipelineState.DONE,
}

# where a failed step lands. Only the deposit is non-fatal.
ON_FAILURE: Dict[PipelineState, PipelineState] = {
    PipelineState.APPROVING_SWAP: PipelineState.FAILED,
    PipelineState.RESOLVING_POOL: PipelineState.FAILED,
    PipelineState.SWAPPING: PipelineState.FAILED,
    PipelineState.READING_BALANCE: PipelineState.FAILED,
    PipelineState.APPROVING_SUPPLY: PipelineState.FAILED,
    PipelineState.SUPPLYING: PipelineState.DONE,
}

TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.FAILED})


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Outcome of one step: either `value` or a tagged `error`."""
    state: PipelineState
    value: Optional[T] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None


@dataclass
class PipelineRun:
    """
    Report of a single run. Built fresh by every `run()` call.
    """
    swap_amount: str
    state: PipelineState = PipelineState.IDLE
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])
    receipts: Dict[str, TransactionReceipt] = field(default_factory=dict)
    pool: Optional[PoolDescriptor] = None
    swap_params: Optional[SwapParameters] = None
    amount_in_raw: Optional[int] = None
    balance_out_raw: Optional[int] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.state == PipelineState.DONE

    @property
    def supplied(self) -> bool:
        return PipelineState.SUPPLYING.value in self.receipts

    def record_error(self, result: StepResult) -> None:
        err = result.error
        self.errors.append({
            "state": result.state.value,
            "kind": result.error_kind,
            "message": str(err),
            "cause": repr(err.cause) if err is not None and err.cause is not None else None,
            "tx_hash": err.tx_hash if err is not None else None,
        })

    def as_dict(self) -> Dict[str, Any]:
        return to_json_safe({
            "swap_amount": self.swap_amount,
            "state": self.state.value,
            "history": [s.value for s in self.history],
            "amount_in_raw": self.amount_in_raw,
            "balance_out_raw": self.balance_out_raw,
            "pool": self.pool.model_dump() if self.pool else None,
            "swap_params": self.swap_params.model_dump() if self.swap_params else None,
            "receipts": {k: r.model_dump() for k, r in self.receipts.items()},
            "errors": self.errors,
        })
