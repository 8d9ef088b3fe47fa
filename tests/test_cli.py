"""CLI commands driven through click's CliRunner with a mocked client."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from crowdfund_client import cli as cli_module
from crowdfund_client.cli import cli
from crowdfund_client.client import CrowdfundClient

from tests.conftest import TEST_SECRET
from tests.mocks import OTHER, OWNER, TOKEN, MockContract, MockProxy, MockWallet


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_contract(monkeypatch):
    """Route every CLI client at one in-memory contract, signing as the owner."""
    contract = MockContract()
    monkeypatch.setenv("CROWDFUND_SECRET", TEST_SECRET)

    def make_client(cfg, confirm):
        return CrowdfundClient(
            MockWallet([OWNER]),
            lambda signer: MockProxy(contract, signer.address),
            confirm=confirm,
            symbol=cfg.symbol,
        )

    monkeypatch.setattr(cli_module, "_make_client", make_client)
    return contract


# ── Info ──────────────────────────────────────────────────────────


def test_config_hides_secret(runner, monkeypatch):
    monkeypatch.setenv("CROWDFUND_SECRET", TEST_SECRET)
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 0
    assert "***configured***" in result.output
    assert TEST_SECRET not in result.output


def test_show_requires_secret(runner, monkeypatch):
    monkeypatch.delenv("CROWDFUND_SECRET", raising=False)
    result = runner.invoke(cli, ["show"])
    assert result.exit_code == 1
    assert "No keypair secret" in result.output


def test_invalid_secret_exits_cleanly(runner, monkeypatch):
    monkeypatch.setenv("CROWDFUND_SECRET", "SNOTAREALSECRET")
    result = runner.invoke(cli, ["fund", "1"])
    assert result.exit_code == 1
    assert "not a valid Stellar secret seed" in result.output
    assert isinstance(result.exception, SystemExit)


def test_show(runner, cli_contract):
    cli_contract.total = 250 * TOKEN
    result = runner.invoke(cli, ["show"])
    assert result.exit_code == 0, result.output
    assert "25.0%" in result.output
    assert "(owner)" in result.output
    assert "Active" in result.output


def test_show_json(runner, cli_contract):
    result = runner.invoke(cli, ["show", "--json"])
    assert result.exit_code == 0, result.output
    view = json.loads(result.output)
    assert view["connected"] is True
    assert view["campaign"]["goal"] == "1000.0 CFT"


def test_check(runner, cli_contract):
    cli_contract.balances[OTHER] = 12 * TOKEN
    result = runner.invoke(cli, ["check", OTHER])
    assert result.exit_code == 0, result.output
    assert "12.0 CFT" in result.output


# ── Transactions ──────────────────────────────────────────────────


def test_fund(runner, cli_contract):
    result = runner.invoke(cli, ["fund", "250"])
    assert result.exit_code == 0, result.output
    assert "Funded 250 CFT successfully!" in result.output
    assert "Tx hash:" in result.output
    assert cli_contract.total == 250 * TOKEN


def test_fund_invalid_amount(runner, cli_contract):
    result = runner.invoke(cli, ["fund", "0"])
    assert result.exit_code == 1
    assert "Enter valid amount > 0" in result.output


def test_end_with_yes(runner, cli_contract):
    result = runner.invoke(cli, ["end", "--yes"])
    assert result.exit_code == 0, result.output
    assert cli_contract.started is False


def test_end_prompt_declined(runner, cli_contract):
    result = runner.invoke(cli, ["end"], input="n\n")
    assert result.exit_code == 1
    assert "End funding? This is irreversible." in result.output
    assert "Aborted!" in result.output
    assert cli_contract.started is True


def test_withdraw_prompt_accepted(runner, cli_contract):
    cli_contract.total = 100 * TOKEN
    result = runner.invoke(cli, ["withdraw", "40"], input="y\n")
    assert result.exit_code == 0, result.output
    assert cli_contract.total == 60 * TOKEN


def test_withdraw_all_non_owner(runner, cli_contract):
    cli_contract.owner = OTHER
    result = runner.invoke(cli, ["withdraw-all", "-y"])
    assert result.exit_code == 1
    assert "Only the owner can do this" in result.output
    assert "Reason:" in result.output
