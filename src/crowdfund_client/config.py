"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from crowdfund_client.models.config import ClientConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "CROWDFUND_",
) -> ClientConfig:
    """Load client configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (CROWDFUND_SECRET, etc.)
        2. TOML config file
        3. Defaults from ClientConfig

    The contract id and function names are fixed and cannot be overridden.
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClientConfig()

    # ── Client section ─────────────────────────────────────
    client = raw.get("client", {})
    if v := client.get("log_level"):
        cfg.log_level = str(v)

    # ── Stellar section ────────────────────────────────────
    stellar = raw.get("stellar", {})
    if v := stellar.get("network"):
        cfg.network = str(v)
    if v := stellar.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := stellar.get("network_passphrase"):
        cfg.network_passphrase = str(v)
    if v := stellar.get("keypair_secret"):
        cfg.keypair_secret = str(v)
    if v := stellar.get("base_fee"):
        cfg.base_fee = int(v)
    if v := stellar.get("tx_timeout"):
        cfg.tx_timeout = int(v)
    if v := stellar.get("confirm_timeout"):
        cfg.confirm_timeout = int(v)
    if v := stellar.get("confirm_poll_interval"):
        cfg.confirm_poll_interval = float(v)

    # ── Display section ────────────────────────────────────
    display = raw.get("display", {})
    if v := display.get("symbol"):
        cfg.symbol = str(v)

    # ── Environment variable overrides (highest priority) ──
    if secret := os.environ.get(f"{env_prefix}SECRET"):
        cfg.keypair_secret = secret
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = rpc
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    return cfg
