"""CLI entry point for the crowdfund client."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Awaitable, Callable

import click
from stellar_sdk import Keypair
from stellar_sdk.exceptions import Ed25519SecretSeedInvalidError

from crowdfund_client.client import CrowdfundClient
from crowdfund_client.config import load_config
from crowdfund_client.models.config import ClientConfig
from crowdfund_client.models.results import OutcomeKind, RevertKind, TxOutcome
from crowdfund_client.sync.orchestrator import ConfirmGate

Action = Callable[[CrowdfundClient], Awaitable[TxOutcome]]


def _make_client(cfg: ClientConfig, confirm: ConfirmGate) -> CrowdfundClient:
    return CrowdfundClient.from_config(cfg, confirm=confirm)


def _require_secret(cfg: ClientConfig) -> None:
    """Exit with error if no valid keypair secret is configured."""
    if not cfg.keypair_secret:
        click.echo("Error: No keypair secret configured.", err=True)
        click.echo("Set CROWDFUND_SECRET env var or keypair_secret in config.", err=True)
        sys.exit(1)
    try:
        Keypair.from_secret(cfg.keypair_secret)
    except Ed25519SecretSeedInvalidError:
        click.echo("Error: Configured keypair secret is not a valid Stellar secret seed.", err=True)
        sys.exit(1)


def _confirm_gate(yes: bool) -> ConfirmGate:
    if yes:
        return lambda prompt: True
    return lambda prompt: click.confirm(prompt, default=False)


def _run(cfg: ClientConfig, action: Action | None, yes: bool = False) -> tuple[TxOutcome, dict]:
    """Connect, run ``action`` (if any), and return its outcome plus a dashboard dict."""

    async def _go() -> tuple[TxOutcome, dict]:
        client = _make_client(cfg, _confirm_gate(yes))
        try:
            outcome = await client.connect()
            if outcome.succeeded and action is not None:
                outcome = await action(client)
            return outcome, client.dashboard().to_dict()
        finally:
            await client.close()

    return asyncio.run(_go())


def _report(outcome: TxOutcome) -> None:
    """Print an outcome and exit non-zero unless it succeeded."""
    if outcome.kind is OutcomeKind.CANCELLED:
        click.echo("Aborted!", err=True)
        sys.exit(1)

    click.echo(outcome.message, err=not outcome.succeeded)
    if outcome.tx_hash:
        click.echo(f"  Tx hash:  {outcome.tx_hash}")
    if outcome.revert and outcome.revert.kind is not RevertKind.UNCLASSIFIED:
        click.echo(f"  Reason:   {outcome.revert.raw_reason}", err=True)
    if outcome.refresh_error:
        click.echo(f"Warning: could not refresh contract state: {outcome.refresh_error}", err=True)
    if not outcome.succeeded:
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """crowdfund-client - fund and manage the crowdfund contract."""
    ctx.ensure_object(dict)
    cfg = load_config(config_path)
    ctx.obj["config"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show effective configuration."""
    cfg: ClientConfig = ctx.obj["config"]
    click.echo(f"Network:    {cfg.network}")
    click.echo(f"RPC URL:    {cfg.rpc_url}")
    click.echo(f"Contract:   {cfg.contract_id}")
    click.echo(f"Symbol:     {cfg.symbol}")
    click.echo(f"Secret:     {'***configured***' if cfg.keypair_secret else '(not set)'}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the dashboard as JSON")
@click.pass_context
def show(ctx: click.Context, as_json: bool) -> None:
    """Connect and show campaign progress and your contribution."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)

    outcome, view = _run(cfg, None)
    if as_json:
        click.echo(json.dumps(view, indent=2))
        if not outcome.succeeded:
            sys.exit(1)
        return

    if not outcome.succeeded:
        _report(outcome)

    account = view["account"]
    click.echo(f"Account:    {account['address']}{' (owner)' if account['is_owner'] else ''}")
    click.echo(f"Balance:    {account['balance']}")

    campaign = view["campaign"]
    if campaign is None:
        click.echo("Campaign:   (state unavailable)", err=True)
        if outcome.refresh_error:
            click.echo(f"  {outcome.refresh_error}", err=True)
        sys.exit(1)

    click.echo("")
    click.echo(f"Status:     {campaign['status_label']}")
    click.echo(f"Progress:   {campaign['progress_label']} ({campaign['band']})")
    click.echo(f"Funded:     {campaign['total_funded']} / {campaign['goal']}")
    click.echo(f"Time left:  {campaign['time_left']}")
    click.echo(f"Owner:      {campaign['owner']}")


@cli.command()
@click.argument("address")
@click.pass_context
def check(ctx: click.Context, address: str) -> None:
    """Show the contribution recorded for ADDRESS."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)
    outcome, _ = _run(cfg, lambda client: client.check_address(address))
    _report(outcome)


# ── Transactions ───────────────────────────────────────


@cli.command()
@click.argument("amount")
@click.pass_context
def fund(ctx: click.Context, amount: str) -> None:
    """Contribute AMOUNT tokens to the campaign."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)
    outcome, _ = _run(cfg, lambda client: client.fund(amount))
    _report(outcome)


@cli.command()
@click.argument("amount")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def withdraw(ctx: click.Context, amount: str, yes: bool) -> None:
    """Withdraw AMOUNT tokens (owner only)."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)
    outcome, _ = _run(cfg, lambda client: client.withdraw_some(amount), yes)
    _report(outcome)


@cli.command("withdraw-all")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def withdraw_all(ctx: click.Context, yes: bool) -> None:
    """Withdraw all funds (owner only)."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)
    outcome, _ = _run(cfg, lambda client: client.withdraw_all(), yes)
    _report(outcome)


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def end(ctx: click.Context, yes: bool) -> None:
    """End the funding period. Irreversible (owner only)."""
    cfg: ClientConfig = ctx.obj["config"]
    _require_secret(cfg)
    outcome, _ = _run(cfg, lambda client: client.end_funding(), yes)
    _report(outcome)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
