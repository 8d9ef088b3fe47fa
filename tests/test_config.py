"""Config loading from TOML and environment."""

from __future__ import annotations

from crowdfund_client.config import load_config
from crowdfund_client.models.config import CROWDFUND_CONTRACT_ID, NETWORK_PASSPHRASES

from tests.conftest import TEST_SECRET


def test_defaults(tmp_path, monkeypatch):
    for name in ("SECRET", "NETWORK", "RPC_URL", "LOG_LEVEL"):
        monkeypatch.delenv(f"CROWDFUND_{name}", raising=False)
    cfg = load_config(tmp_path / "missing.toml")
    assert cfg.network == "testnet"
    assert cfg.passphrase == NETWORK_PASSPHRASES["testnet"]
    assert cfg.contract_id == CROWDFUND_CONTRACT_ID
    assert cfg.keypair_secret == ""
    assert cfg.symbol == "CFT"


def test_toml_file(tmp_path, monkeypatch):
    monkeypatch.delenv("CROWDFUND_SECRET", raising=False)
    monkeypatch.delenv("CROWDFUND_NETWORK", raising=False)
    path = tmp_path / "crowdfund.toml"
    path.write_text(
        """
[client]
log_level = "debug"

[stellar]
network = "mainnet"
rpc_url = "https://rpc.example.org"
keypair_secret = "SFILE"
base_fee = 500
confirm_timeout = 30
confirm_poll_interval = 0.5

[display]
symbol = "XCF"
"""
    )
    cfg = load_config(path)
    assert cfg.log_level == "debug"
    assert cfg.network == "mainnet"
    assert cfg.passphrase == NETWORK_PASSPHRASES["mainnet"]
    assert cfg.rpc_url == "https://rpc.example.org"
    assert cfg.keypair_secret == "SFILE"
    assert cfg.base_fee == 500
    assert cfg.confirm_timeout == 30
    assert cfg.confirm_poll_interval == 0.5
    assert cfg.symbol == "XCF"


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "crowdfund.toml"
    path.write_text('[stellar]\nkeypair_secret = "SFILE"\nrpc_url = "https://file"\n')
    monkeypatch.setenv("CROWDFUND_SECRET", TEST_SECRET)
    monkeypatch.setenv("CROWDFUND_RPC_URL", "https://env")
    monkeypatch.setenv("CROWDFUND_LOG_LEVEL", "warning")

    cfg = load_config(path)
    assert cfg.keypair_secret == TEST_SECRET
    assert cfg.rpc_url == "https://env"
    assert cfg.log_level == "warning"


def test_explicit_passphrase_wins(tmp_path, monkeypatch):
    monkeypatch.delenv("CROWDFUND_NETWORK", raising=False)
    path = tmp_path / "crowdfund.toml"
    path.write_text('[stellar]\nnetwork = "testnet"\nnetwork_passphrase = "Custom ; 2024"\n')
    assert load_config(path).passphrase == "Custom ; 2024"
