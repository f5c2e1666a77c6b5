# swapsupply/main.py
"""
Swap the input stablecoin for the output token on Uniswap v3, then supply the
whole output-token balance to the lending pool.

Usage:
    swap-supply 1          # swap 1 unit of the input token (e.g. 1 USDC)
    python -m swapsupply 1

Environment (.env is loaded): RPC_URL and PRIVATE_KEY are required; token /
contract constants, POOL_FEE_TIER, REFERRAL_CODE, RECEIPT_TIMEOUT_SEC and
LOG_LEVEL are optional (see swapsupply/config.py).

Exit codes: 0 when the run reaches DONE (even if the final supply failed),
1 when it ends in FAILED, 2 on bad input or missing configuration.
"""

import argparse
import json
import logging
import os
import sys
from typing import Optional

from .adapters.aave_v3 import AaveV3Adapter
from .adapters.erc20 import ERC20Adapter
from .adapters.uniswap_v3 import UniswapV3Adapter
from .config import PipelineConfig, Settings, get_settings
from .services.balance_reader import BalanceReader
from .services.exceptions import ConfigError
from .services.pool_resolver import PoolResolver
from .services.supply_service import SupplyStep
from .services.swap_executor import SwapExecutor
from .services.token_approval import TokenApprovalStep
from .services.tx_service import TxService
from .usecases.swap_and_supply_use_case import SwapAndSupplyUseCase


def _setup_logging():
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    known = isinstance(logging.getLevelName(log_level), int)
    logging.basicConfig(
        level=log_level if known else "INFO",
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if not known:
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")


def build_use_case(
    s: Settings,
    config: Optional[PipelineConfig] = None,
    tx: Optional[TxService] = None,
) -> SwapAndSupplyUseCase:
    """Wire adapters and steps around one signing wallet."""
    cfg = config or PipelineConfig.from_settings(s)
    tx = tx or TxService.from_settings(s)

    erc20 = ERC20Adapter(tx.w3)
    uni = UniswapV3Adapter(tx.w3, factory=cfg.factory, router=cfg.router)
    lending = AaveV3Adapter(tx.w3, pool=cfg.lending_pool)

    return SwapAndSupplyUseCase(
        config=cfg,
        wallet_address=tx.sender_address(),
        approval=TokenApprovalStep(tx, erc20),
        pool_resolver=PoolResolver(uni),
        swapper=SwapExecutor(tx, uni),
        balances=BalanceReader(erc20),
        supplier=SupplyStep(tx, lending, referral_code=cfg.referral_code),
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="swap-supply",
        description="Swap the input token on Uniswap v3 and supply the proceeds to the lending pool.",
    )
    parser.add_argument("amount", type=str, help="Human amount of the input token to swap (e.g. 1 or 2.5)")
    args = parser.parse_args(argv)

    log = logging.getLogger("swapsupply")

    try:
        _setup_logging()
        s = get_settings()
        use_case = build_use_case(s)
    except ConfigError as e:
        log.error("Configuration error: %s", e)
        return 2

    try:
        run = use_case.run(args.amount)
    except ValueError as e:
        log.error("%s", e)
        return 2

    print(json.dumps(run.as_dict(), indent=2))
    if run.completed:
        log.info("Script executed successfully")
        return 0
    log.error("Run ended in %s", run.state.value)
    return 1


if __name__ == "__main__":
    sys.exit(main())
