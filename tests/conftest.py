from typing import List, Tuple
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from swapsupply.config import PipelineConfig
from swapsupply.domain.models import TokenDescriptor, TransactionReceipt

PRIVATE_KEY = "0x" + "11" * 32

USDC = Web3.to_checksum_address("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
LINK = Web3.to_checksum_address("0x514910771af9ca656af840dff83e8264ecf986ca")
ROUTER = Web3.to_checksum_address("0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45")
FACTORY = Web3.to_checksum_address("0x1f98431c8ad98523631ae4a59f267346ea31f984")
LENDING_POOL = Web3.to_checksum_address("0x87870bca3f3fd6335c3f4ce8392d69350b4fa4e2")
POOL = Web3.to_checksum_address("0x" + "a1" * 20)
WALLET = Web3.to_checksum_address("0x" + "b2" * 20)


class RecordingTx:
    """Stands in for TxService: records (label, fn) and hands back a receipt."""

    def __init__(self, fail_labels=()):
        self.sent: List[Tuple[str, object]] = []
        self.fail_labels = set(fail_labels)

    def send(self, fn, *, label: str = "tx", value: int = 0) -> TransactionReceipt:
        self.sent.append((label, fn))
        if label in self.fail_labels:
            raise RuntimeError(f"{label} rejected by node")
        return TransactionReceipt(tx_hash="0x" + f"{len(self.sent):064x}", status=1, block_number=100)


@pytest.fixture
def usdc() -> TokenDescriptor:
    return TokenDescriptor(address=USDC, decimals=6)


@pytest.fixture
def link() -> TokenDescriptor:
    return TokenDescriptor(address=LINK, decimals=18)


@pytest.fixture
def pipeline_config(usdc, link) -> PipelineConfig:
    return PipelineConfig(
        token_in=usdc,
        token_out=link,
        router=ROUTER,
        factory=FACTORY,
        lending_pool=LENDING_POOL,
        fee_tier=3000,
    )


@pytest.fixture
def w3() -> MagicMock:
    return MagicMock(name="w3")


@pytest.fixture
def recording_tx() -> RecordingTx:
    return RecordingTx()
