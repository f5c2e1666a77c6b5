import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Union

from ..config import PipelineConfig
from ..domain.pipeline import (
    NEXT_STATE,
    ON_FAILURE,
    TERMINAL_STATES,
    PipelineRun,
    PipelineState,
    StepResult,
)
from ..services.balance_reader import BalanceReader
from ..services.exceptions import PipelineError
from ..services.pool_resolver import PoolResolver
from ..services.supply_service import SupplyStep
from ..services.swap_executor import SwapExecutor, build_swap_parameters
from ..services.token_approval import TokenApprovalStep
from ..services.utils import to_base_units, to_human


class SwapAndSupplyUseCase:
    """
    Runs approve -> resolve pool -> swap -> read balance -> approve -> supply
    for the pair described by `config`, one step at a time.

    Rules:
      - Each step runs at most once per run. Nothing is retried.
      - Every step outcome becomes a StepResult; where a failure goes is
        decided by ON_FAILURE, not by exceptions bubbling up.
      - Any failure up to the lending-pool approval ends the run in FAILED.
      - A failed supply is logged and the run still ends in DONE.
      - Nothing from a previous run is reused (pool, params, balance).

    Callers must not run two pipelines on the same wallet at once (nonces).
    """

    def __init__(
        self,
        config: PipelineConfig,
        wallet_address: str,
        approval: TokenApprovalStep,
        pool_resolver: PoolResolver,
        swapper: SwapExecutor,
        balances: BalanceReader,
        supplier: SupplyStep,
        logger: Optional[logging.Logger] = None,
    ):
        self._cfg = config
        self._wallet = wallet_address
        self._approval = approval
        self._pools = pool_resolver
        self._swapper = swapper
        self._balances = balances
        self._supplier = supplier
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    # ---------- state machine helpers ----------

    def _attempt(self, state: PipelineState, fn: Callable[..., Any], *args) -> StepResult:
        try:
            return StepResult(state=state, value=fn(*args))
        except PipelineError as err:
            return StepResult(state=state, error=err)

    def _advance(self, run: PipelineRun, result: StepResult) -> PipelineState:
        """Apply the transition table for the outcome of the current step."""
        if result.ok:
            nxt = NEXT_STATE[run.state]
        else:
            run.record_error(result)
            nxt = ON_FAILURE[run.state]
            if nxt == PipelineState.FAILED:
                self._logger.error(
                    "%s failed (%s): %s -- aborting run", run.state.value, result.error_kind, result.error,
                )
            else:
                self._logger.error(
                    "%s failed (%s): %s -- run still completes, balance stays in wallet",
                    run.state.value, result.error_kind, result.error,
                )

        self._logger.info("%s -> %s", run.state.value, nxt.value)
        run.state = nxt
        run.history.append(nxt)
        return nxt

    def _enter(self, run: PipelineRun) -> None:
        run.state = NEXT_STATE[run.state]
        run.history.append(run.state)
        self._logger.info("%s -> %s", PipelineState.IDLE.value, run.state.value)

    # ---------- public API ----------

    def run(self, swap_amount_human: Union[Decimal, int, str]) -> PipelineRun:
        try:
            amount = Decimal(str(swap_amount_human))
        except InvalidOperation:
            raise ValueError(f"invalid swap amount: {swap_amount_human!r}") from None
        if not amount.is_finite() or amount <= 0:
            raise ValueError(f"swap amount must be > 0, got {swap_amount_human!r}")

        cfg = self._cfg
        run = PipelineRun(swap_amount=str(amount))
        run.amount_in_raw = to_base_units(amount, cfg.token_in.decimals)
        if run.amount_in_raw == 0:
            raise ValueError(
                f"swap amount {amount} is below one base unit of {cfg.token_in.address}",
            )

        self._enter(run)

        # 1) approve token_in for the router
        res = self._attempt(run.state, self._approval.approve, cfg.token_in, cfg.router, amount)
        if res.ok:
            run.receipts[res.state.value] = res.value
        if self._advance(run, res) in TERMINAL_STATES:
            return run

        # 2) resolve the pool (zero address -> PoolNotFoundError -> FAILED)
        res = self._attempt(run.state, self._pools.resolve_pool, cfg.token_in, cfg.token_out, cfg.fee_tier)
        if res.ok:
            run.pool = res.value
        if self._advance(run, res) in TERMINAL_STATES:
            return run

        # 3) swap, amountOutMinimum = 0
        run.swap_params = build_swap_parameters(
            run.pool, cfg.token_in, cfg.token_out, self._wallet, run.amount_in_raw,
        )
        res = self._attempt(run.state, self._swapper.execute_swap, run.swap_params)
        if res.ok:
            run.receipts[res.state.value] = res.value
        if self._advance(run, res) in TERMINAL_STATES:
            return run

        # 4) whole token_out balance of the wallet
        res = self._attempt(run.state, self._balances.read_balance, cfg.token_out, self._wallet)
        if res.ok:
            run.balance_out_raw = int(res.value)
            self._logger.info(
                "Balance of %s after swap: %s raw (%s)",
                cfg.token_out.address, run.balance_out_raw, to_human(run.balance_out_raw, cfg.token_out.decimals),
            )
        if self._advance(run, res) in TERMINAL_STATES:
            return run

        # 5) approve exactly that balance for the lending pool
        res = self._attempt(
            run.state, self._approval.approve_raw, cfg.token_out, cfg.lending_pool, run.balance_out_raw,
        )
        if res.ok:
            run.receipts[res.state.value] = res.value
        if self._advance(run, res) in TERMINAL_STATES:
            return run

        # 6) supply; failure is logged only (ON_FAILURE[SUPPLYING] == DONE)
        res = self._attempt(
            run.state, self._supplier.supply, cfg.token_out, run.balance_out_raw, self._wallet,
        )
        if res.ok:
            run.receipts[res.state.value] = res.value
        self._advance(run, res)
        return run
