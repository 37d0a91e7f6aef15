"""marketsettle CLI entry point.

Exit codes:
    0   Market settled by this run, or already settled
    1   Unexpected failure
    2   Configuration error (unknown network, bad signing key, invalid settings)
    10  NoDeploymentRegistry
    11  NoDeploymentForNetwork
    12  MarketNotDeployed
    13  InvalidDeploymentRecord
    20  MarketNotExpired
    30  ChainQueryFailed
    40  TransactionRejected
    41  ReceiptUnavailable (outcome unknown)
    50  InvalidState
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from web3 import Web3

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from marketsettle import __version__
from marketsettle.config import ConfigError, get_settings
from marketsettle.services.chain import ChainAuthError
from marketsettle.settlement import (
    MarketNotExpiredError,
    MarketStatus,
    ReceiptUnavailableError,
    SettlementError,
    SettlementOutcome,
    check_market,
    settle_market,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIG = 2


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from marketsettle.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def _format_wei(value: int) -> str:
    return f"{value} wei ({Web3.from_wei(value, 'ether')} tokens)"


def _format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(
        "%a, %d %b %Y %H:%M:%S UTC"
    )


def _print_outcome(outcome: SettlementOutcome) -> None:
    if outcome.already_settled:
        print("\n⚠️  Market is already settled!")
        print("\nSettlement Details:")
    else:
        print("\n=== Settlement Results ===")

    print(f"  Market: {outcome.market_address} ({outcome.network_key})")
    print(f"  Settlement Price: {_format_wei(outcome.settlement_price)}")
    print(f"  Strike Price: {_format_wei(outcome.strike_price)}")
    print(f"  Settled Above Strike: {'YES ✅' if outcome.settled_above_strike else 'NO ❌'}")
    print(f"  Answer Timestamp: {_format_timestamp(outcome.answer_timestamp)}")

    if outcome.transaction_hash:
        print(f"  Transaction Hash: {outcome.transaction_hash}")
        print(f"  Gas Used: {outcome.gas_used}")
        if outcome.block_number is not None:
            print(f"  Block: {outcome.block_number}")

        if outcome.settled_above_strike:
            print("\n🎉 Market settled ABOVE strike price!\n")
        else:
            print("\n📉 Market settled BELOW strike price.\n")
    else:
        print()


def _print_status(status: MarketStatus) -> None:
    state = status.state
    print("\n=== Market Status ===\n")
    print(f"Network: {status.network_key}")
    print(f"Market: {status.market_address}")
    print(f"Phase: {status.phase}")
    print(f"Strike Price: {_format_wei(state.strike_price)}")

    if not state.has_expired:
        print(f"Expires In: {status.seconds_until_expiry} seconds")
    if state.is_settled:
        print(f"Settlement Price: {_format_wei(state.settlement_price)}")
        print(f"Settled Above Strike: {'YES ✅' if state.settled_above_strike else 'NO ❌'}")
        print(f"Answer Timestamp: {_format_timestamp(state.answer_timestamp)}")
    print()


def _report_error(error: SettlementError, output_format: str) -> int:
    if isinstance(error, MarketNotExpiredError):
        logger.info(f"{error.kind} at {error.step}: {error.message}")
    else:
        logger.error(f"{error.kind} at {error.step}: {error.message}")

    if output_format == "json":
        print(json.dumps(error.to_dict(), indent=2))
        return error.exit_code

    if isinstance(error, MarketNotExpiredError):
        print(f"\n⏳ {error.message}\n")
    elif isinstance(error, ReceiptUnavailableError):
        print("\n⚠️  Settlement outcome UNKNOWN")
        print(f"   Transaction: {error.tx_hash or 'not known'}")
        print(f"   {error.message}")
        print("   Re-run 'status' before retrying; the market may already be settled.\n")
    else:
        print(f"\n❌ Settlement failed at {error.step} step [{error.kind}]: {error.message}\n")
        tx_hash = getattr(error, "tx_hash", None)
        if tx_hash and error.step == "report":
            print(f"   Settlement transaction {tx_hash} was confirmed; the market is settled.")
            print("   Run 'status' to read the outcome.\n")
    return error.exit_code


def cmd_settle(args: argparse.Namespace) -> int:
    """Settle the market deployed on the selected network."""
    _init_logfire()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = get_settings()
        context = settings.network_context(args.network)

        if args.format == "text":
            print(f"\n=== Settling market on {context.network_key} ===")

        outcome = asyncio.run(settle_market(context, settings))

        if args.format == "json":
            print(json.dumps(outcome.to_dict(), indent=2))
        else:
            _print_outcome(outcome)
        return EXIT_OK

    except SettlementError as e:
        return _report_error(e, args.format)
    except (ConfigError, ChainAuthError, ValidationError) as e:
        logger.error(f"Configuration error: {e}")
        print(f"\n❌ Configuration error: {e}\n")
        return EXIT_CONFIG
    except Exception as e:
        logger.error(f"Settlement failed: {e}", exc_info=True)
        print(f"\n❌ Settlement failed: {e}\n")
        return EXIT_UNEXPECTED


def cmd_status(args: argparse.Namespace) -> int:
    """Display the market's on-chain state without settling it."""
    _init_logfire()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = get_settings()
        context = settings.network_context(args.network)
        status = asyncio.run(check_market(context, settings))

        if args.format == "json":
            print(json.dumps(status.model_dump(mode="json"), indent=2))
        else:
            _print_status(status)
        return EXIT_OK

    except SettlementError as e:
        return _report_error(e, args.format)
    except (ConfigError, ChainAuthError, ValidationError) as e:
        logger.error(f"Configuration error: {e}")
        print(f"\n❌ Configuration error: {e}\n")
        return EXIT_CONFIG
    except Exception as e:
        logger.error(f"Status check failed: {e}", exc_info=True)
        print(f"\n❌ Status check failed: {e}\n")
        return EXIT_UNEXPECTED


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== marketsettle Configuration ===\n")
        print(f"Data Directory: {settings.data_dir}")
        print(f"Deployments File: {settings.deployments_path}\n")

        print(f"Selected Network: {settings.network}")
        print("Networks:")
        for name, network in sorted(settings.networks.items()):
            marker = "*" if name == settings.network else " "
            print(f" {marker} {name}: chain {network.chain_id} @ {network.rpc_url}")
        print()

        print("Settlement:")
        print(f"  Receipt Timeout: {settings.settlement.receipt_timeout_seconds:.0f}s")
        print(f"  Receipt Poll Interval: {settings.settlement.receipt_poll_seconds}s")
        print(f"  Request Timeout: {settings.settlement.request_timeout_seconds:.0f}s\n")

        print("Credentials:")
        print(f"  EVM Private Key: {'✓ Set' if settings.evm_private_key else '✗ Not set'}")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return EXIT_OK

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return EXIT_CONFIG
    except ConfigError as e:
        print(f"\n❌ Configuration Error: {e}\n")
        return EXIT_CONFIG
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return EXIT_UNEXPECTED


def _add_network_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--network",
        default=None,
        help="Network name from configuration (default: NETWORK env var or bscTestnet)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marketsettle",
        description="marketsettle: Settle binary strike-price markets after expiry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("\n", 1)[1],
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"marketsettle {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_settle = subparsers.add_parser(
        "settle",
        help="Settle the market after expiry (no-op if already settled)",
    )
    _add_network_options(parser_settle)
    parser_settle.set_defaults(func=cmd_settle)

    parser_status = subparsers.add_parser(
        "status",
        help="Display the market's on-chain state",
    )
    _add_network_options(parser_status)
    parser_status.set_defaults(func=cmd_status)

    parser_config = subparsers.add_parser(
        "config",
        help="Display merged configuration",
    )
    parser_config.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_UNEXPECTED

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
