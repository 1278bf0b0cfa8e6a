"""Bittensor-style CLI configuration for the POI radio."""

from __future__ import annotations

import argparse
from typing import Optional

import bittensor as bt

from poi_radio.radio.checks import CHECKS


def add_args(parser: argparse.ArgumentParser) -> None:
    bt.logging.add_args(parser)
    bt.Wallet.add_args(parser)

    parser.add_argument(
        "--radio.use_wallet",
        action="store_true",
        default=False,
        help="Sign messages with the wallet hotkey instead of POI_RADIO_MNEMONIC.",
    )
    parser.add_argument(
        "--radio.panic_if_diverged",
        action="store_true",
        default=None,
        help="Exit with an error when the local POI diverges from the stake-weighted majority.",
    )
    parser.add_argument(
        "--radio.check",
        type=str,
        choices=sorted(CHECKS),
        default=None,
        help="Run a message check and exit with its verdict.",
    )
    parser.add_argument(
        "--radio.count",
        type=int,
        default=5,
        help="Messages a check waits for before deciding.",
    )


def config(argv: Optional[list] = None) -> bt.Config:
    parser = argparse.ArgumentParser(conflict_handler="resolve")
    add_args(parser)
    # bittensor exposes `bt.config(parser)` in newer versions, and `bt.Config(parser=...)` in older.
    try:
        return bt.config(parser, args=argv)
    except Exception:
        return bt.Config(parser=parser, args=argv)
