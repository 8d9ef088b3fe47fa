"""Stellar/Soroban integration components."""

from crowdfund_client.stellar.proxy import SorobanContractProxy
from crowdfund_client.stellar.wallet import KeypairSigner, KeypairWallet

__all__ = ["SorobanContractProxy", "KeypairSigner", "KeypairWallet"]
