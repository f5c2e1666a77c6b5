from typing import Tuple

from web3 import Web3

from ..domain.models import SwapParameters

# ---- minimal ABIs, only the fragments the pipeline calls ----
ABI_FACTORY = [
    {"name":"getPool","outputs":[{"type":"address","name":"pool"}],
     "inputs":[{"type":"address","name":"tokenA"},{"type":"address","name":"tokenB"},{"type":"uint24","name":"fee"}],
     "stateMutability":"view","type":"function"},
]

ABI_POOL = [
    {"name":"token0","outputs":[{"type":"address"}],"inputs":[],"stateMutability":"view","type":"function"},
    {"name":"token1","outputs":[{"type":"address"}],"inputs":[],"stateMutability":"view","type":"function"},
    {"name":"fee","outputs":[{"type":"uint24"}],"inputs":[],"stateMutability":"view","type":"function"},
]

# SwapRouter02 (IV3SwapRouter): ExactInputSingleParams has no deadline
ABI_SWAP_ROUTER = [
    {"inputs":[{"components":[
        {"internalType":"address","name":"tokenIn","type":"address"},
        {"internalType":"address","name":"tokenOut","type":"address"},
        {"internalType":"uint24","name":"fee","type":"uint24"},
        {"internalType":"address","name":"recipient","type":"address"},
        {"internalType":"uint256","name":"amountIn","type":"uint256"},
        {"internalType":"uint256","name":"amountOutMinimum","type":"uint256"},
        {"internalType":"uint160","name":"sqrtPriceLimitX96","type":"uint160"}
    ],"internalType":"struct IV3SwapRouter.ExactInputSingleParams","name":"params","type":"tuple"}],
     "name":"exactInputSingle",
     "outputs":[{"internalType":"uint256","name":"amountOut","type":"uint256"}],
     "stateMutability":"payable","type":"function"},
]


class UniswapV3Adapter:
    """Factory / pool reads and router call builder for Uniswap v3."""

    def __init__(self, w3: Web3, factory: str, router: str):
        self.w3 = w3
        self.factory = Web3.to_checksum_address(factory)
        self.router = Web3.to_checksum_address(router)

    def factory_contract(self):
        return self.w3.eth.contract(address=self.factory, abi=ABI_FACTORY)

    def pool_contract(self, pool_addr: str):
        return self.w3.eth.contract(address=Web3.to_checksum_address(pool_addr), abi=ABI_POOL)

    def router_contract(self):
        return self.w3.eth.contract(address=self.router, abi=ABI_SWAP_ROUTER)

    # ---------- reads ----------
    def get_pool(self, token_a: str, token_b: str, fee: int) -> str:
        return self.factory_contract().functions.getPool(
            Web3.to_checksum_address(token_a),
            Web3.to_checksum_address(token_b),
            int(fee),
        ).call()

    def pool_tokens_and_fee(self, pool_addr: str) -> Tuple[str, str, int]:
        pc = self.pool_contract(pool_addr)
        t0 = pc.functions.token0().call()
        t1 = pc.functions.token1().call()
        fee = int(pc.functions.fee().call())
        return t0, t1, fee

    # ---------- writes (return ContractFunctions) ----------
    def fn_exact_input_single(self, params: SwapParameters):
        return self.router_contract().functions.exactInputSingle(params.as_tuple())
