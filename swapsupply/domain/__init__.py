from .models import PoolDescriptor, SwapParameters, TokenDescriptor, TransactionReceipt
from .pipeline import PipelineRun, PipelineState, StepResult

__all__ = [
    "PoolDescriptor",
    "SwapParameters",
    "TokenDescriptor",
    "TransactionReceipt",
    "PipelineRun",
    "PipelineState",
    "StepResult",
]
