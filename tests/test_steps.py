from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from swapsupply.adapters.aave_v3 import AaveV3Adapter
from swapsupply.adapters.erc20 import ERC20Adapter
from swapsupply.adapters.uniswap_v3 import UniswapV3Adapter
from swapsupply.domain.models import PoolDescriptor
from swapsupply.services.balance_reader import BalanceReader
from swapsupply.services.exceptions import (
    ApprovalError,
    PoolNotFoundError,
    QueryError,
    SupplyError,
    SwapExecutionError,
    TransactionRevertedError,
)
from swapsupply.services.pool_resolver import PoolResolver
from swapsupply.services.supply_service import SupplyStep
from swapsupply.services.swap_executor import SwapExecutor, build_swap_parameters
from swapsupply.services.token_approval import TokenApprovalStep
from swapsupply.services.utils import ZERO_ADDRESS

from .conftest import FACTORY, LENDING_POOL, LINK, POOL, ROUTER, USDC, WALLET, RecordingTx


def _contracts_by_address(w3, contracts: dict):
    w3.eth.contract.side_effect = lambda address, abi: contracts[address]


# ---------- TokenApprovalStep ----------

def test_approve_converts_human_amount_with_token_decimals(w3, usdc, recording_tx):
    token_contract = w3.eth.contract.return_value
    step = TokenApprovalStep(recording_tx, ERC20Adapter(w3))

    rcpt = step.approve(usdc, ROUTER, Decimal("1"))

    token_contract.functions.approve.assert_called_once_with(ROUTER, 1_000_000)
    assert w3.eth.contract.call_args.kwargs["address"] == USDC
    assert recording_tx.sent[0][0] == "approval"
    assert rcpt.ok


def test_approve_fractional_amount_is_exact(w3, link, recording_tx):
    TokenApprovalStep(recording_tx, ERC20Adapter(w3)).approve(link, LENDING_POOL, "0.123456789012345678")
    w3.eth.contract.return_value.functions.approve.assert_called_once_with(LENDING_POOL, 123456789012345678)


def test_approve_raw_passes_amount_through(w3, link, recording_tx):
    TokenApprovalStep(recording_tx, ERC20Adapter(w3)).approve_raw(link, LENDING_POOL, 42)
    w3.eth.contract.return_value.functions.approve.assert_called_once_with(LENDING_POOL, 42)


def test_approve_wraps_send_failure(w3, usdc):
    step = TokenApprovalStep(RecordingTx(fail_labels={"approval"}), ERC20Adapter(w3))
    with pytest.raises(ApprovalError) as ei:
        step.approve(usdc, ROUTER, 1)
    assert isinstance(ei.value.cause, RuntimeError)
    assert ei.value.__cause__ is ei.value.cause


def test_approve_revert_exposes_tx_hash(w3, usdc):
    tx = MagicMock()
    tx.send.side_effect = TransactionRevertedError(tx_hash="0xdead", receipt={"status": 0}, msg="reverted")
    with pytest.raises(ApprovalError) as ei:
        TokenApprovalStep(tx, ERC20Adapter(w3)).approve(usdc, ROUTER, 1)
    assert ei.value.tx_hash == "0xdead"


# ---------- PoolResolver ----------

def _pool_contract(token0, token1, fee):
    pc = MagicMock(name="pool")
    pc.functions.token0.return_value.call.return_value = token0
    pc.functions.token1.return_value.call.return_value = token1
    pc.functions.fee.return_value.call.return_value = fee
    return pc


def test_resolve_pool_returns_pool_order(w3, usdc, link):
    factory = MagicMock(name="factory")
    factory.functions.getPool.return_value.call.return_value = POOL
    # LINK < USDC by address, so the pool stores LINK as token0
    _contracts_by_address(w3, {FACTORY: factory, POOL: _pool_contract(LINK, USDC, 3000)})

    pool = PoolResolver(UniswapV3Adapter(w3, factory=FACTORY, router=ROUTER)).resolve_pool(usdc, link, 3000)

    factory.functions.getPool.assert_called_once_with(USDC, LINK, 3000)
    assert pool == PoolDescriptor(pool_address=POOL, token0=LINK, token1=USDC, fee_tier=3000)
    assert pool.token0 != usdc.address
    assert pool.has_token(usdc.address) and pool.has_token(link.address)


def test_resolve_pool_zero_address_raises_pool_not_found(w3, usdc, link):
    factory = MagicMock(name="factory")
    factory.functions.getPool.return_value.call.return_value = ZERO_ADDRESS
    _contracts_by_address(w3, {FACTORY: factory})

    with pytest.raises(PoolNotFoundError) as ei:
        PoolResolver(UniswapV3Adapter(w3, factory=FACTORY, router=ROUTER)).resolve_pool(usdc, link, 500)

    assert ei.value.fee_tier == 500
    # never touched a pool contract
    assert w3.eth.contract.call_count == 1


def test_resolve_pool_factory_call_failure_is_query_error(w3, usdc, link):
    factory = MagicMock(name="factory")
    factory.functions.getPool.return_value.call.side_effect = ConnectionError("rpc down")
    _contracts_by_address(w3, {FACTORY: factory})

    with pytest.raises(QueryError):
        PoolResolver(UniswapV3Adapter(w3, factory=FACTORY, router=ROUTER)).resolve_pool(usdc, link, 3000)


# ---------- SwapExecutor ----------

def test_build_swap_parameters_has_no_slippage_bound(usdc, link):
    pool = PoolDescriptor(pool_address=POOL, token0=LINK, token1=USDC, fee_tier=3000)
    params = build_swap_parameters(pool, usdc, link, WALLET, 1_000_000)

    assert params.amount_out_minimum == 0
    assert params.price_limit == 0
    assert params.fee == 3000
    assert params.as_tuple() == (USDC, LINK, 3000, WALLET, 1_000_000, 0, 0)


def test_execute_swap_calls_exact_input_single(w3, usdc, link, recording_tx):
    router = w3.eth.contract.return_value
    pool = PoolDescriptor(pool_address=POOL, token0=LINK, token1=USDC, fee_tier=3000)
    params = build_swap_parameters(pool, usdc, link, WALLET, 1_000_000)

    rcpt = SwapExecutor(recording_tx, UniswapV3Adapter(w3, factory=FACTORY, router=ROUTER)).execute_swap(params)

    router.functions.exactInputSingle.assert_called_once_with((USDC, LINK, 3000, WALLET, 1_000_000, 0, 0))
    assert w3.eth.contract.call_args.kwargs["address"] == ROUTER
    assert recording_tx.sent[0][0] == "swap"
    assert rcpt.ok


def test_execute_swap_wraps_failure(w3, usdc, link):
    pool = PoolDescriptor(pool_address=POOL, token0=LINK, token1=USDC, fee_tier=3000)
    params = build_swap_parameters(pool, usdc, link, WALLET, 1)
    executor = SwapExecutor(RecordingTx(fail_labels={"swap"}), UniswapV3Adapter(w3, factory=FACTORY, router=ROUTER))
    with pytest.raises(SwapExecutionError):
        executor.execute_swap(params)


# ---------- BalanceReader ----------

def test_read_balance_zero_is_valid(w3, link):
    w3.eth.contract.return_value.functions.balanceOf.return_value.call.return_value = 0
    assert BalanceReader(ERC20Adapter(w3)).read_balance(link, WALLET) == 0
    w3.eth.contract.return_value.functions.balanceOf.assert_called_once_with(WALLET)


def test_read_balance_is_never_cached(w3, link):
    call = w3.eth.contract.return_value.functions.balanceOf.return_value.call
    call.side_effect = [5, 9]
    reader = BalanceReader(ERC20Adapter(w3))
    assert [reader.read_balance(link, WALLET), reader.read_balance(link, WALLET)] == [5, 9]


def test_read_balance_failure_is_query_error(w3, link):
    w3.eth.contract.return_value.functions.balanceOf.return_value.call.side_effect = TimeoutError("slow node")
    with pytest.raises(QueryError):
        BalanceReader(ERC20Adapter(w3)).read_balance(link, WALLET)


# ---------- SupplyStep ----------

def test_supply_calls_lending_pool(w3, link, recording_tx):
    lending = w3.eth.contract.return_value
    rcpt = SupplyStep(recording_tx, AaveV3Adapter(w3, pool=LENDING_POOL)).supply(link, 777, WALLET)

    lending.functions.supply.assert_called_once_with(LINK, 777, WALLET, 0)
    assert w3.eth.contract.call_args.kwargs["address"] == LENDING_POOL
    assert recording_tx.sent[0][0] == "supply"
    assert rcpt.ok


def test_supply_uses_configured_referral_code(w3, link, recording_tx):
    SupplyStep(recording_tx, AaveV3Adapter(w3, pool=LENDING_POOL), referral_code=12).supply(link, 1, WALLET)
    w3.eth.contract.return_value.functions.supply.assert_called_once_with(LINK, 1, WALLET, 12)


def test_supply_wraps_failure(w3, link):
    step = SupplyStep(RecordingTx(fail_labels={"supply"}), AaveV3Adapter(w3, pool=LENDING_POOL))
    with pytest.raises(SupplyError):
        step.supply(link, 1, WALLET)


def test_resolve_pool_rejects_pool_for_other_pair(w3, usdc, link):
    factory = MagicMock(name="factory")
    factory.functions.getPool.return_value.call.return_value = POOL
    other = "0x" + "d4" * 20
    _contracts_by_address(w3, {FACTORY: factory, POOL: _pool_contract(other, USDC, 3000)})

    with pytest.raises(QueryError):
        PoolResolver(UniswapV3Adapter(w3, factory=FACTORY, router=ROUTER)).resolve_pool(usdc, link, 3000)


@pytest.mark.parametrize("token0", ["0x1234", "not-an-address"])
def test_resolve_pool_malformed_metadata_is_query_error(w3, usdc, link, token0):
    factory = MagicMock(name="factory")
    factory.functions.getPool.return_value.call.return_value = POOL
    _contracts_by_address(w3, {FACTORY: factory, POOL: _pool_contract(token0, USDC, 3000)})

    with pytest.raises(QueryError) as ei:
        PoolResolver(UniswapV3Adapter(w3, factory=FACTORY, router=ROUTER)).resolve_pool(usdc, link, 3000)
    assert ei.value.cause is not None
