"""Configuration models for the crowdfund client."""

from __future__ import annotations

from dataclasses import dataclass

# Fixed deployment of the crowdfund contract this client talks to
CROWDFUND_CONTRACT_ID = "CACBN6G2EPPLAQORDB3LXN3SULGVYBAETFZTNYTNDQ77B7JFRIBT66V2"

NETWORK_PASSPHRASES = {
    "testnet": "Test SDF Network ; September 2015",
    "mainnet": "Public Global Stellar Network ; September 2015",
}


@dataclass(frozen=True)
class ContractMethods:
    """Contract function names, fixed by the deployed contract."""

    goal_amount: str = "goalAmount"
    total_funded: str = "checkAllFunds"
    end_time: str = "endTime"
    is_started: str = "isStarted"
    balance_of: str = "checkYourFunds"
    owner: str = "owner"
    fund: str = "setFund"
    end_funding: str = "endFunding"
    withdraw_some: str = "withdrawalSomeFunds"
    withdraw_all: str = "withdrawlAll"


CONTRACT_METHODS = ContractMethods()


@dataclass
class ClientConfig:
    """Complete client configuration."""

    # Client
    log_level: str = "info"

    # Stellar
    network: str = "testnet"
    rpc_url: str = "https://soroban-testnet.stellar.org"
    network_passphrase: str = ""  # derived from network when empty
    keypair_secret: str = ""  # loaded from env var CROWDFUND_SECRET
    base_fee: int = 100  # stroops
    tx_timeout: int = 300  # seconds a built transaction stays valid
    confirm_timeout: int = 60  # seconds to wait for a submitted tx
    confirm_poll_interval: float = 1.0  # seconds between get_transaction polls

    # Display
    symbol: str = "CFT"

    @property
    def contract_id(self) -> str:
        return CROWDFUND_CONTRACT_ID

    @property
    def passphrase(self) -> str:
        return self.network_passphrase or NETWORK_PASSPHRASES.get(self.network, "")
