"""ShadowMarkets CLI entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from shadowmarkets import __version__
from shadowmarkets.config import ConfigError, Role, Settings, get_settings
from shadowmarkets.pipeline import (
    build_runtime,
    run_creation_cycle,
    run_oracle_cycle,
    seed_market,
    settle_market_manually,
)
from shadowmarkets.services.chain import to_base_units
from shadowmarkets.sources import append_pending_message
from shadowmarkets.storage import FileMarketsStore, write_json_atomic
from shadowmarkets.time_utils import format_seconds, now_seconds

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

CONFIG_TEMPLATE = """# ShadowMarkets Configuration
# Operational parameters only. Secrets (chain_api_key, github_token,
# llm_api_key, logfire_token, telegram_*) belong in .env.

chain:
  paper_mode: true
  gateway_url: ""
  collateral_mint: ""
  collateral_decimals: 6
  oracle_address: ""

market:
  initial_liquidity_base_units: 1000000
  seed_trade_amount: 1.0
  default_duration_seconds: 3600
  activation_window_seconds: 900

source:
  kind: local
  local_events_file: private-events.json
  github_owner: ""
  github_repo: ""
  discord_guild_id: ""
  discord_channel_id: ""

llm:
  provider: none
  model: gpt-4o-mini

oracle:
  unhandled_kind_policy: refuse

scheduler:
  creation_interval_seconds: 20
  oracle_interval_seconds: 20

telegram:
  send_creation_alerts: true
  send_activation_alerts: true
  send_settlement_alerts: true
"""


def _init_logfire(settings: Settings) -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from shadowmarkets.observability import initialize_logfire

        initialize_logfire(settings)
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def _load_settings(role: Role) -> Settings:
    settings = get_settings()
    settings.validate_for_role(role)
    return settings


def _print_config_error(e: ConfigError) -> None:
    print("\n❌ Configuration Error:\n")
    for key in e.missing:
        print(f"  • {key} is required")
    if not e.missing:
        print(f"  • {e}")
    print()


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize data directory, config template and empty markets file."""
    try:
        settings = get_settings()
        data_dir = settings.data_dir
        data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created data directory: {data_dir}")

        config_path = data_dir / "config.yaml"
        if not config_path.exists():
            config_path.write_text(CONFIG_TEMPLATE)
            logger.info(f"Created config template: {config_path}")
        else:
            logger.info(f"Config file already exists: {config_path}")

        if not settings.markets_path.exists():
            write_json_atomic(settings.markets_path, {"markets": []})
            logger.info(f"Created markets file: {settings.markets_path}")

        events_path = settings.data_path(settings.source.local_events_file)
        if not events_path.exists():
            write_json_atomic(events_path, {"events": [], "consumedIds": [], "signals": {}})
            logger.info(f"Created local events file: {events_path}")

        print(f"\n✓ Data directory initialized at {data_dir}")
        print("\nNext steps:")
        print("1. Add secrets to .env (chain_api_key, github_token, llm_api_key, ...)")
        print("2. Review and customize data/config.yaml")
        print("3. Run 'python -m shadowmarkets config' to verify configuration")
        print("4. Run 'python -m shadowmarkets run' to start polling\n")
        return 0

    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        print(f"\n❌ Initialization failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== ShadowMarkets Configuration ===\n")
        print(f"Data Directory: {settings.data_dir}\n")

        print("Chain:")
        print(f"  Paper Mode: {settings.chain.paper_mode}")
        print(f"  Gateway: {settings.chain.gateway_url or '(none)'}")
        print(f"  Collateral Mint: {settings.chain.collateral_mint or '(none)'}")
        print(f"  Oracle Address: {settings.chain.oracle_address or '(operator wallet)'}\n")

        print("Market:")
        print(f"  Initial Liquidity: {settings.market.initial_liquidity_base_units:,} base units")
        print(f"  Seed Trade: {settings.market.seed_trade_amount} collateral")
        print(f"  YES Odds: {settings.market.yes_odds_bps or 5000} bps")
        print(f"  Default Duration: {settings.market.default_duration_seconds}s")
        print(f"  Activation Window: {settings.market.activation_window_seconds}s\n")

        print("Source:")
        print(f"  Kind: {settings.source.kind}")
        if settings.source.kind == "github":
            print(f"  Repository: {settings.source.github_owner}/{settings.source.github_repo}")
        elif settings.source.kind == "discord":
            print(f"  Guild/Channel: {settings.source.discord_guild_id}/{settings.source.discord_channel_id}")
        else:
            print(f"  Events File: {settings.data_path(settings.source.local_events_file)}")
        print()

        print("Oracle:")
        print(f"  LLM Provider: {settings.llm.provider}")
        if settings.llm_enabled:
            print(f"  LLM Model: {settings.llm.model}")
        print(f"  Unhandled Kind Policy: {settings.oracle.unhandled_kind_policy}\n")

        print("Scheduler (seconds):")
        print(f"  Creation Interval: {settings.scheduler.creation_interval_seconds}")
        print(f"  Oracle Interval: {settings.scheduler.oracle_interval_seconds}\n")

        print("Secrets:")
        print(f"  Chain Gateway: {'✓ Set' if settings.chain_api_key else '✗ Not set'}")
        print(f"  GitHub: {'✓ Set' if settings.github_token else '✗ Not set'}")
        print(f"  LLM: {'✓ Set' if settings.llm_api_key else '✗ Not set'}")
        print(f"  Telegram: {'✓ Set' if settings.telegram_bot_token else '✗ Not set'}")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return 1


def cmd_status(args: argparse.Namespace) -> int:
    """List markets and their settlement status."""
    try:
        settings = get_settings()
        records = FileMarketsStore(settings.markets_path).load_markets()

        print("\n=== ShadowMarkets Status ===\n")
        if not records:
            print("No markets yet.\n")
            return 0

        now = now_seconds()
        settled = [r for r in records if r.settled]
        print(f"Markets: {len(records)} ({len(settled)} settled)\n")
        for record in records:
            if record.settled and record.result:
                status = f"SETTLED {'YES' if record.result.yes_winner else 'NO'}"
                if record.result.used_llm:
                    status += " (LLM)"
            elif now >= record.end_time_seconds:
                status = "ENDED, awaiting settlement"
            else:
                status = f"OPEN until {format_seconds(record.end_time_seconds)}"
            print(f"  • {record.market} [{record.event.kind}] {status}")
            print(f"    {record.question}")
        print()
        return 0

    except Exception as e:
        logger.error(f"Failed to read status: {e}")
        print(f"\n❌ Failed to read status: {e}\n")
        return 1


def cmd_create(args: argparse.Namespace) -> int:
    """Run one creation tick."""
    try:
        settings = _load_settings("creation")
        _init_logfire(settings)
        print("\n=== Market Creation ===\n")

        result = asyncio.run(run_creation_cycle(build_runtime(settings)))

        if result.record is None:
            print("No new events.\n")
            return 0

        print(f"✓ Created market {result.record.market}")
        print(f"  Question: {result.record.question}")
        print(f"  Ends: {format_seconds(result.record.end_time_seconds)}")
        if result.activation:
            print(f"✓ Activated (enable={result.activation.enable_signature}, "
                  f"seed={result.activation.trade_signature})\n")
            return 0

        print(f"\n❌ Activation failed: {result.activation_error}\n")
        return 1

    except ConfigError as e:
        _print_config_error(e)
        return 1
    except Exception as e:
        logger.error(f"Creation failed: {e}", exc_info=True)
        print(f"\n❌ Creation failed: {e}\n")
        return 1


def cmd_oracle(args: argparse.Namespace) -> int:
    """Run one oracle sweep."""
    try:
        settings = _load_settings("oracle")
        _init_logfire(settings)
        print("\n=== Oracle Sweep ===\n")

        result = asyncio.run(run_oracle_cycle(build_runtime(settings)))

        print("✓ Sweep complete\n")
        print(f"Checked: {result.checked}")
        print(f"Settled: {result.settled}")
        print(f"Not ended / already resolved: {result.pending}")
        print(f"Refused (no rule): {result.refused}")
        print(f"Failed: {result.failed}\n")
        return 0 if result.failed == 0 else 1

    except ConfigError as e:
        _print_config_error(e)
        return 1
    except Exception as e:
        logger.error(f"Oracle sweep failed: {e}", exc_info=True)
        print(f"\n❌ Oracle sweep failed: {e}\n")
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """Start the poll loop for one or both roles."""
    try:
        if args.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        settings = _load_settings(args.role)
        _init_logfire(settings)
        runtime = build_runtime(settings)

        print("\n=== ShadowMarkets ===\n")
        print(f"Version: {__version__}")
        print(f"Role: {args.role}")
        print(f"Mode: {'PAPER' if settings.chain.paper_mode else 'LIVE'}")
        print(f"Source: {settings.source.kind}")
        print(f"Data Directory: {settings.data_dir}\n")

        if args.once:
            if args.role in ("creation", "all"):
                asyncio.run(run_creation_cycle(runtime))
            if args.role in ("oracle", "all"):
                asyncio.run(run_oracle_cycle(runtime))
            print("\nSingle tick complete.\n")
            return 0

        from shadowmarkets.scheduler import start_scheduler

        print("Starting scheduler...\n")
        start_scheduler(runtime, args.role)
        return 0

    except ConfigError as e:
        _print_config_error(e)
        return 1
    except KeyboardInterrupt:
        print("\n\nReceived interrupt signal. Shutting down...\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to run: {e}", exc_info=True)
        print(f"\n❌ Failed to run: {e}\n")
        return 1


def cmd_seed(args: argparse.Namespace) -> int:
    """Activate a market manually, or retry only its seed trade."""
    try:
        settings = _load_settings("creation")
        amount = (
            to_base_units(args.amount, settings.chain.collateral_decimals)
            if args.amount is not None
            else None
        )
        result = asyncio.run(
            seed_market(build_runtime(settings), args.market, amount, seed_only=args.seed_only)
        )

        if isinstance(result, str):
            print(f"\n✓ Seed trade placed on {args.market} (sig={result})\n")
        else:
            print(f"\n✓ Activated {args.market}")
            print(f"  Enable: {result.enable_signature}")
            print(f"  Seed: {result.trade_signature}\n")
        return 0

    except ConfigError as e:
        _print_config_error(e)
        return 1
    except Exception as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)
        print(f"\n❌ Seeding failed: {e}\n")
        return 1


def cmd_settle(args: argparse.Namespace) -> int:
    """Settle one market through the oracle, or with an explicit outcome."""
    try:
        settings = _load_settings("oracle")
        _init_logfire(settings)
        outcome = asyncio.run(
            settle_market_manually(
                build_runtime(settings),
                args.market,
                yes_winner=args.yes_winner,
                wait=args.wait,
            )
        )

        if not outcome.did_settle:
            print(f"\n✗ Not settled: {outcome.reason}\n")
            return 1

        print(f"\n✓ Settled {args.market}: {'YES' if outcome.yes_winner else 'NO'}")
        print(f"  Signature: {outcome.signature}")
        print(f"  Used LLM: {outcome.used_llm}")
        print(f"  Reasoning: {outcome.reasoning}\n")
        return 0

    except ConfigError as e:
        _print_config_error(e)
        return 1
    except Exception as e:
        logger.error(f"Settlement failed: {e}", exc_info=True)
        print(f"\n❌ Settlement failed: {e}\n")
        return 1


def cmd_enqueue(args: argparse.Namespace) -> int:
    """Append a statement to the Discord pending queue."""
    try:
        settings = get_settings()
        path = settings.data_path(settings.source.discord_pending_file)
        entry = append_pending_message(path, args.statement, args.author)
        print(f"\n✓ Queued message {entry['messageId']} in {path}\n")
        return 0

    except Exception as e:
        logger.error(f"Enqueue failed: {e}")
        print(f"\n❌ Enqueue failed: {e}\n")
        return 1


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="ShadowMarkets: prediction markets created and settled from private events",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ShadowMarkets {__version__}",
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

    parser_status = subparsers.add_parser(
        "status",
        help="List markets and their settlement status",
    )
    parser_status.set_defaults(func=cmd_status)

    parser_create = subparsers.add_parser(
        "create",
        help="Run one market creation tick",
    )
    parser_create.set_defaults(func=cmd_create)

    parser_oracle = subparsers.add_parser(
        "oracle",
        help="Run one oracle settlement sweep",
    )
    parser_oracle.set_defaults(func=cmd_oracle)

    parser_run = subparsers.add_parser(
        "run",
        help="Start the poll loop",
    )
    parser_run.add_argument(
        "--role",
        choices=["creation", "oracle", "all"],
        default="all",
        help="Which agents this process runs",
    )
    parser_run.add_argument(
        "--once",
        action="store_true",
        help="Run one tick per role then exit",
    )
    parser_run.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser_run.set_defaults(func=cmd_run)

    parser_seed = subparsers.add_parser(
        "seed",
        help="Enable trading and seed a market (operator recovery)",
    )
    parser_seed.add_argument("--market", required=True, help="Market address")
    parser_seed.add_argument(
        "--seed-only",
        action="store_true",
        help="Only place the seed trade (market already enabled)",
    )
    parser_seed.add_argument(
        "--amount",
        type=float,
        default=None,
        help="Seed amount in whole collateral units (default: market.seed_trade_amount)",
    )
    parser_seed.set_defaults(func=cmd_seed)

    parser_settle = subparsers.add_parser(
        "settle",
        help="Settle a market now",
    )
    parser_settle.add_argument("--market", required=True, help="Market address")
    parser_settle.add_argument(
        "--wait",
        action="store_true",
        help="Wait for the market end time before settling",
    )
    parser_settle.add_argument(
        "--yes-winner",
        type=_parse_bool,
        default=None,
        help="Explicit outcome (true/false); required for markets not in the markets file",
    )
    parser_settle.set_defaults(func=cmd_settle)

    parser_enqueue = subparsers.add_parser(
        "enqueue",
        help="Append a statement to the Discord pending queue",
    )
    parser_enqueue.add_argument("statement", help="Prediction statement")
    parser_enqueue.add_argument("--author", default="operator", help="Author name")
    parser_enqueue.set_defaults(func=cmd_enqueue)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
