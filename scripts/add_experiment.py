#!/usr/bin/env python3
"""Store an experiment definition and print its UUID."""

import argparse
import logging
import sys
from typing import List, Optional

from torii.config import KNOWN_PROVIDERS, load_config
from torii.db import DatabaseClient
from torii.experiments import Experiment, split_remote
from torii.logging_utils import configure_logging
from torii.store import ExperimentStore
from torii.vpn import CUSTOM_NAME

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Add a VPN measurement experiment.")
    parser.add_argument(
        "provider",
        choices=[*KNOWN_PROVIDERS, CUSTOM_NAME],
        help="Provider the experiment targets (or borrows credentials from).",
    )
    parser.add_argument("--name", default="", help="Experiment name (random if omitted).")
    parser.add_argument("--cc", default="", help="Country code to restrict endpoints to.")
    parser.add_argument("--max", default="", help="Endpoints per descriptor (default: 1).")
    parser.add_argument("--comment", default="", help="Free-form note.")
    parser.add_argument(
        "--remote",
        default="",
        help="Pin a single ip:port remote instead of drawing from the provider.",
    )
    args = parser.parse_args(argv)
    if args.remote:
        try:
            split_remote(args.remote)
        except ValueError as exc:
            parser.error(str(exc))
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config()
    configure_logging(config, include_console=False)
    if not config.database_url:
        print("DATABASE_URL must be configured", file=sys.stderr)
        return 1

    exp = Experiment(
        provider=args.provider,
        name=args.name,
        country_code=args.cc.lower(),
        comment=args.comment,
        max=args.max,
        endpoint_remote=args.remote,
    )
    with DatabaseClient(config.database_url) as db_client:
        store = ExperimentStore(db_client)
        store.ensure_schema()
        exp_uuid = store.add(exp)

    print(exp_uuid)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
