"""Shared fixtures for crowdfund_client tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from crowdfund_client.api.subscriptions import StatusBus
from crowdfund_client.client import CrowdfundClient
from crowdfund_client.models.config import CROWDFUND_CONTRACT_ID, ClientConfig
from crowdfund_client.sync.orchestrator import TransactionOrchestrator
from crowdfund_client.sync.synchronizer import StateSynchronizer

from tests.mocks import FUNDER, OWNER, MockContract, MockProxy, MockWallet

TEST_SECRET = "SBWVJTD3F5ETMVWCNI7MM4HUAPUSCUXXMUEJZJTPRWRJGXW2BF4SVQTK"
TEST_PUBLIC = "GDNAG4KFFVF5HCSGRWZIXZNL2SR2KBGJSHW2A6FI6DZI62XF6IBLO4GD"

CONTRACT_ID = CROWDFUND_CONTRACT_ID


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Stellar Testnet"
    meta["Crowdfund Contract"] = CONTRACT_ID
    meta["Owner Account"] = OWNER


def make_test_config(**overrides) -> ClientConfig:
    """Build a ClientConfig suitable for testing."""
    defaults = dict(
        network="testnet",
        rpc_url="https://soroban-testnet.stellar.org",
        keypair_secret=TEST_SECRET,
        confirm_timeout=5,
        confirm_poll_interval=0.0,
    )
    defaults.update(overrides)
    return ClientConfig(**defaults)


def allow(prompt: str) -> bool:
    return True


@pytest.fixture
def test_config():
    return make_test_config()


@pytest.fixture
def contract():
    """Shared in-memory contract, 1000 token goal, funding open."""
    return MockContract()


@pytest.fixture
def bus():
    return StatusBus()


@pytest.fixture
def proxy(contract):
    """Proxy signing as a non-owner funder."""
    return MockProxy(contract, FUNDER)


@pytest.fixture
def owner_proxy(contract):
    return MockProxy(contract, OWNER)


@pytest.fixture
def synchronizer(bus, proxy):
    """Synchronizer bound to the funder's proxy with the funder connected."""
    s = StateSynchronizer(bus, proxy)
    s.set_account(FUNDER)
    return s


@pytest.fixture
def orchestrator(synchronizer, bus):
    return TransactionOrchestrator(synchronizer, bus, confirm=allow)


@pytest.fixture
def wallet():
    return MockWallet([FUNDER])


@pytest.fixture
async def client(wallet, contract):
    """CrowdfundClient over the mock wallet, not yet connected."""
    c = CrowdfundClient(
        wallet,
        lambda signer: MockProxy(contract, signer.address),
        confirm=allow,
    )
    yield c
    await c.close()


@pytest.fixture
async def connected_client(client):
    outcome = await client.connect()
    assert outcome.succeeded
    return client
