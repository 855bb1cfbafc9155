"""SideBet CLI entry point."""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from sidebet import __version__
from sidebet.config import get_settings
from sidebet.ledger import LedgerIntegrityError, load_balances
from sidebet.notifications import NotificationDispatcher
from sidebet.storage import (
    DocumentStore,
    MemoryStore,
    StorageError,
    load_snapshot,
    save_snapshot,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

CONFIG_TEMPLATE = """# SideBet Configuration
# Operational parameters. Secrets (LOGFIRE_TOKEN, service account paths)
# belong in .env, not here.

firebase:
  project_id: ""
  credentials_path: ""

balances:
  integrity_policy: skip  # skip | reject

notifications:
  dedupe: true
  fallback_sender_name: Someone
  closing_soon_window_minutes: 60

scheduler:
  closing_soon_sweep_minutes: 60

api:
  host: 0.0.0.0
  port: 8000
  allowed_origins:
    - http://localhost:3000
"""

SNAPSHOT_TEMPLATE = """# SideBet local snapshot: collection -> document id -> fields
users:
  alice:
    displayName: Alice
  bob:
    displayName: Bob

bets:
  example-bet:
    title: Will it rain on Saturday?
    type: YES_NO
    status: CLOSED
    perUserWager: 10
    participants: [alice, bob]
    picks:
      alice: "YES"
      bob: "NO"
    winnerId: alice
"""


def _init_logfire(app=None) -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from sidebet.observability import initialize_logfire

        initialize_logfire(get_settings(), app)
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def _open_store(snapshot: str | None) -> DocumentStore:
    """A snapshot-backed MemoryStore, or Firestore when no snapshot is given."""
    if snapshot:
        return load_snapshot(Path(snapshot))

    from sidebet.storage.firestore import FirestoreStore

    return FirestoreStore(get_settings().firebase)


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize data directory and configuration files."""
    data_dir = Path("data").resolve()

    try:
        data_dir.mkdir(exist_ok=True)
        logger.info(f"Created data directory: {data_dir}")

        config_path = data_dir / "config.yaml"
        if not config_path.exists():
            config_path.write_text(CONFIG_TEMPLATE)
            logger.info(f"Created config template: {config_path}")
        else:
            logger.info(f"Config file already exists: {config_path}")

        snapshot_path = data_dir / "snapshot.yaml"
        if not snapshot_path.exists():
            snapshot_path.write_text(SNAPSHOT_TEMPLATE)
            logger.info(f"Created sample snapshot: {snapshot_path}")
        else:
            logger.info(f"Snapshot already exists: {snapshot_path}")

        print(f"\n✓ Data directory initialized at {data_dir}")
        print("\nNext steps:")
        print("1. Copy .env.example to .env and set your Firebase credentials")
        print("2. Review and customize data/config.yaml if needed")
        print("3. Run 'python -m sidebet balances --user alice --snapshot data/snapshot.yaml'\n")

        return 0

    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        print(f"\n❌ Initialization failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== SideBet Configuration ===\n")
        print(f"Data Directory: {settings.data_dir}\n")

        print("Firebase:")
        print(f"  Project: {settings.firebase.project_id or '(default)'}")
        print(
            f"  Credentials: {settings.firebase.credentials_path or 'application default'}\n"
        )

        print("Balances:")
        print(f"  Integrity Policy: {settings.balances.integrity_policy}\n")

        print("Notifications:")
        print(f"  Dedupe: {settings.notifications.dedupe}")
        print(f"  Fallback Sender Name: {settings.notifications.fallback_sender_name}")
        print(
            f"  Closing Soon Window: {settings.notifications.closing_soon_window_minutes} min\n"
        )

        print("Scheduler (minutes):")
        print(f"  Closing Soon Sweep: {settings.scheduler.closing_soon_sweep_minutes}\n")

        print("API:")
        print(f"  Listen: {settings.api.host}:{settings.api.port}")
        print(f"  Allowed Origins: {', '.join(settings.api.allowed_origins)}\n")

        print("Secrets:")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return 0

    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Configuration error: {e}\n")
        return 1


def cmd_balances(args: argparse.Namespace) -> int:
    """Print who owes the user and whom the user owes."""
    try:
        settings = get_settings()
        store = _open_store(args.snapshot)

        summary = load_balances(
            store, args.user, integrity_policy=settings.balances.integrity_policy
        )

        print(f"\n=== Balances for {args.user} ===\n")
        print("Owed to you:")
        if not summary.owed_to_you:
            print("  (nobody)")
        for balance in summary.owed_to_you:
            print(f"  {balance.user_id}: ${balance.amount:,.2f} ({len(balance.bets)} bets)")

        print("\nYou owe:")
        if not summary.you_owe:
            print("  (nobody)")
        for balance in summary.you_owe:
            print(f"  {balance.user_id}: ${-balance.amount:,.2f} ({len(balance.bets)} bets)")

        print(f"\nNet: ${summary.net_balance:+,.2f}")

        if summary.anomalies:
            print(f"\n⚠ Skipped {len(summary.anomalies)} malformed bet(s):")
            for anomaly in summary.anomalies:
                print(f"  {anomaly.bet_id}: {anomaly.reason}")
        print()

        return 0

    except LedgerIntegrityError as e:
        print(f"\n❌ Ledger integrity error: {e}\n")
        return 1
    except Exception as e:
        logger.error(f"Failed to compute balances: {e}", exc_info=True)
        print(f"\n❌ Failed to compute balances: {e}\n")
        return 1


def cmd_sweep(args: argparse.Namespace) -> int:
    """Run one closing-soon sweep."""
    try:
        settings = get_settings()
        store = _open_store(args.snapshot)
        dispatcher = NotificationDispatcher(store, settings.notifications)

        result = dispatcher.sweep_closing_soon()
        print(f"\n✓ {result}\n")

        if args.snapshot and isinstance(store, MemoryStore):
            save_snapshot(store, Path(args.snapshot))
            logger.info(f"Snapshot updated: {args.snapshot}")

        return 0 if not result.failed else 1

    except StorageError as e:
        print(f"\n❌ Storage error: {e}\n")
        return 1
    except Exception as e:
        logger.error(f"Sweep failed: {e}", exc_info=True)
        print(f"\n❌ Sweep failed: {e}\n")
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """Start the notification scheduler."""
    try:
        if args.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        from sidebet.scheduler import start_scheduler
        from sidebet.storage.firestore import FirestoreStore

        settings = get_settings()
        _init_logfire()

        dispatcher = NotificationDispatcher(
            FirestoreStore(settings.firebase), settings.notifications
        )

        print("Starting scheduler...\n")
        start_scheduler(settings, dispatcher)

        return 0

    except KeyboardInterrupt:
        print("\n\nReceived interrupt signal. Shutting down...\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to start scheduler: {e}", exc_info=True)
        print(f"\nFailed to start: {e}\n")
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the HTTP API."""
    try:
        import uvicorn

        from sidebet.api import create_app

        settings = get_settings()
        store = _open_store(args.snapshot)

        # Without Firestore triggers, dispatch settlement requests in-process
        dispatcher = None
        if args.snapshot:
            dispatcher = NotificationDispatcher(store, settings.notifications)

        app = create_app(store, settings, dispatcher=dispatcher)
        _init_logfire(app)

        uvicorn.run(app, host=settings.api.host, port=args.port or settings.api.port)
        return 0

    except Exception as e:
        logger.error(f"Failed to start API server: {e}", exc_info=True)
        print(f"\nFailed to start: {e}\n")
        return 1


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="SideBet: balances and notifications for friendly wagers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"SideBet {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_init = subparsers.add_parser(
        "init",
        help="Initialize data directory and configuration files",
    )
    parser_init.set_defaults(func=cmd_init)

    parser_config = subparsers.add_parser(
        "config",
        help="Display merged configuration",
    )
    parser_config.set_defaults(func=cmd_config)

    parser_balances = subparsers.add_parser(
        "balances",
        help="Show a user's owed-to-you / you-owe breakdown",
    )
    parser_balances.add_argument("--user", required=True, help="User ID")
    parser_balances.add_argument(
        "--snapshot",
        help="YAML snapshot to read instead of Firestore",
    )
    parser_balances.set_defaults(func=cmd_balances)

    parser_sweep = subparsers.add_parser(
        "sweep",
        help="Run the closing-soon notification sweep once",
    )
    parser_sweep.add_argument(
        "--snapshot",
        help="YAML snapshot to sweep (written back afterwards) instead of Firestore",
    )
    parser_sweep.set_defaults(func=cmd_sweep)

    parser_run = subparsers.add_parser(
        "run",
        help="Start the closing-soon scheduler against Firestore",
    )
    parser_run.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser_run.set_defaults(func=cmd_run)

    parser_serve = subparsers.add_parser(
        "serve",
        help="Start the HTTP API",
    )
    parser_serve.add_argument("--port", type=int, help="Override the configured port")
    parser_serve.add_argument(
        "--snapshot",
        help="Serve a YAML snapshot instead of Firestore",
    )
    parser_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
