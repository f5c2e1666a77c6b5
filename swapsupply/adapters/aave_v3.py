from web3 import Web3

# Aave V3 IPool.supply. The lending pool address is operator supplied, so this
# selector is the external contract the deployment must match.
ABI_LENDING_POOL = [
    {"inputs":[
        {"internalType":"address","name":"asset","type":"address"},
        {"internalType":"uint256","name":"amount","type":"uint256"},
        {"internalType":"address","name":"onBehalfOf","type":"address"},
        {"internalType":"uint16","name":"referralCode","type":"uint16"}],
     "name":"supply","outputs":[],"stateMutability":"nonpayable","type":"function"},
]


class AaveV3Adapter:
    """Lending pool call builder."""

    def __init__(self, w3: Web3, pool: str):
        self.w3 = w3
        self.pool = Web3.to_checksum_address(pool)

    def pool_contract(self):
        return self.w3.eth.contract(address=self.pool, abi=ABI_LENDING_POOL)

    def fn_supply(self, asset: str, amount_raw: int, on_behalf_of: str, referral_code: int = 0):
        return self.pool_contract().functions.supply(
            Web3.to_checksum_address(asset),
            int(amount_raw),
            Web3.to_checksum_address(on_behalf_of),
            int(referral_code),
        )
