#!/usr/bin/env python3
"""Command-line entrypoint printing a VPN nettest descriptor as JSON."""

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from torii.config import AppConfig, REPO_ROOT, load_config
from torii.db import DatabaseClient
from torii.health import HealthRegistry
from torii.logging_utils import configure_logging, perf_span
from torii.network import ProbeHealthOracle
from torii.render import NoConfigError
from torii.selection import SelectionEngine
from torii.service import DescriptorService
from torii.store import ExperimentNotFoundError, ExperimentStore
from torii.vpn import UnknownProviderError, build_registry

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a VPN connection descriptor.")
    parser.add_argument(
        "provider",
        nargs="?",
        help="Provider name (e.g. riseup, tunnelbear). Not needed with --experiment.",
    )
    parser.add_argument(
        "--cc",
        type=str,
        default=None,
        help="Restrict endpoints to this country code (lower-cased before matching).",
    )
    parser.add_argument(
        "--max",
        type=int,
        default=None,
        help="Number of endpoints to draw; only valid together with --cc (default: 1).",
    )
    parser.add_argument(
        "--experiment",
        type=str,
        default=None,
        help="Render the stored experiment with this UUID (needs DATABASE_URL).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the endpoint picker for reproducible output.",
    )
    parser.add_argument(
        "--probe",
        action="store_true",
        help="Probe TCP endpoints once before selecting, skipping unreachable ones.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the descriptor to this file instead of stdout.",
    )
    args = parser.parse_args(argv)
    if not args.provider and not args.experiment:
        parser.error("either a provider or --experiment is required")
    if args.max is not None and not args.cc:
        parser.error("--max requires --cc")
    if args.max is None:
        args.max = 1
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config()
    except ValueError as exc:
        fallback = AppConfig(
            log_directory=REPO_ROOT / "logs",
            log_level="INFO",
            data_directory=REPO_ROOT / "data",
        )
        configure_logging(fallback, include_console=False)
        LOGGER.error("Failed to load configuration: %s", exc)
        print(f"configuration error: {exc}", file=sys.stderr)
        return 1

    # Descriptor JSON goes to stdout; keep log lines in the file only.
    configure_logging(config, include_console=False)

    registry = build_registry(config)
    with perf_span("providers.bootstrap_all", tags={"app": config.app_name}, logger=LOGGER):
        results = registry.bootstrap_all()
    LOGGER.info("Bootstrap results: %s", results)

    health = HealthRegistry()
    if args.probe:
        for provider in registry:
            oracle = ProbeHealthOracle(provider)
            oracle.refresh()
            health.register(provider.name, oracle)

    rng = random.Random(args.seed) if args.seed is not None else None
    engine = SelectionEngine(health, rng=rng)

    db_client = None
    store = None
    if args.experiment:
        if not config.database_url:
            print("DATABASE_URL must be configured to render experiments", file=sys.stderr)
            return 1
        db_client = DatabaseClient(config.database_url)
        store = ExperimentStore(db_client)

    service = DescriptorService(registry, engine, experiments=store, debug=config.debug)
    try:
        if args.experiment:
            descriptor = service.experiment_descriptor(args.experiment)
        elif args.cc:
            descriptor = service.country_descriptor(args.provider, args.cc.lower(), args.max)
        else:
            descriptor = service.random_descriptor(args.provider)
    except (UnknownProviderError, ExperimentNotFoundError) as exc:
        LOGGER.warning("Not found: %s", exc)
        print("not found", file=sys.stderr)
        return 1
    except NoConfigError as exc:
        LOGGER.warning("No descriptor for %s: reason=%s", args.provider or args.experiment, exc.reason)
        print(service.error_string(exc), file=sys.stderr)
        return 1
    except ValueError as exc:
        LOGGER.warning("Bad experiment %s: %s", args.experiment, exc)
        print(service.error_string(exc), file=sys.stderr)
        return 1
    finally:
        if db_client is not None:
            db_client.close()

    payload = descriptor.to_json(indent=2)
    if args.output:
        args.output.write_text(payload + "\n", encoding="utf-8")
    else:
        print(payload)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
