"""
Insight command-line entry point.

Loads a wallet or token from a JSON file, runs the analysis and prints the
result as JSON.

Run with:
    python -m insight.main wallet wallet.json
    python -m insight.main token token.json --summary
    python -m insight.main metrics wallet.json
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from insight.config import Settings, get_settings
from insight.core.exceptions import InsightError
from insight.core.models import Token, Wallet
from insight.services.factory import ServiceFactory
from insight.utils.formatters import (
    format_portfolio_metrics,
    format_token_analysis,
    format_wallet_analysis,
)


def setup_logging(level: str) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        # Logs go to stderr so stdout stays valid JSON
        stream=sys.stderr,
    )

    # Reduce noise from external libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def validate_production_config(settings: Settings) -> None:
    """
    Validate that required API keys are present in production mode.

    Raises:
        RuntimeError: If required env vars are missing.
    """
    if settings.use_mock_services:
        if settings.is_production:
            logging.getLogger(__name__).warning(
                "Mock services are enabled in production"
            )
        return  # Mock mode doesn't need real API keys

    if not settings.birdeye_api_key:
        raise RuntimeError(
            "Missing required env var for production mode: BIRDEYE_API_KEY. "
            "Set USE_MOCK_SERVICES=true for development without API keys."
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="insight",
        description="Portfolio risk and token analytics",
    )
    parser.add_argument(
        "command",
        choices=["wallet", "token", "metrics"],
        help="wallet: analyze a wallet, token: analyze a token, "
        "metrics: wallet headline numbers",
    )
    parser.add_argument("path", type=Path, help="JSON file with the wallet or token")
    parser.add_argument(
        "--summary",
        action="store_true",
        help="print a text summary instead of JSON",
    )
    return parser


async def run(command: str, path: Path, summary: bool, settings: Settings) -> str:
    """
    Execute one command and return its printable output.

    Raises:
        InsightError: If the analysis fails
        pydantic.ValidationError: If the input file does not match the model
    """
    raw = path.read_text(encoding="utf-8")

    factory = ServiceFactory(settings)
    orchestrator = factory.create_orchestrator()

    try:
        result: BaseModel
        if command == "token":
            token = Token.model_validate_json(raw)
            result = await orchestrator.analyze_token(token)
            text = format_token_analysis(result) if summary else None
        elif command == "metrics":
            wallet = Wallet.model_validate_json(raw)
            result = await orchestrator.get_portfolio_metrics(wallet)
            text = format_portfolio_metrics(result) if summary else None
        else:
            wallet = Wallet.model_validate_json(raw)
            result = await orchestrator.analyze_wallet(wallet)
            text = format_wallet_analysis(result) if summary else None
    finally:
        await orchestrator.close()

    return text if text is not None else result.model_dump_json(indent=2)


def main(argv: list[str] | None = None) -> int:
    """
    Main application entry point.

    Initializes:
    1. Configuration from environment
    2. Logging
    3. Services via factory

    Then runs the requested analysis.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    # Load configuration
    settings = get_settings()

    # Setup logging first (so validation errors are logged)
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    # Validate production config
    validate_production_config(settings)

    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Mock mode: {settings.use_mock_services}")

    try:
        output = asyncio.run(run(args.command, args.path, args.summary, settings))
    except InsightError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(e.message, file=sys.stderr)
        return 1
    except PydanticValidationError as e:
        logger.error(f"Invalid input file {args.path}: {e}")
        print(f"Invalid input file: {args.path}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error(f"Cannot read {args.path}: {e}")
        print(f"Cannot read {args.path}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        sys.exit(130)
