"""Protocol interfaces for the crowdfund client's external collaborators."""

from crowdfund_client.interfaces.proxy import ContractProxy
from crowdfund_client.interfaces.wallet import (
    AccountsListener,
    ChainListener,
    Signer,
    WalletProvider,
)

__all__ = [
    "ContractProxy",
    "AccountsListener", "ChainListener", "Signer", "WalletProvider",
]
