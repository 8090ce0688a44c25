"""Utility functions."""

from insight.utils.formatters import (
    format_portfolio_metrics,
    format_token_analysis,
    format_wallet_analysis,
)
from insight.utils.validators import (
    validate_solana_address,
    validate_token,
    validate_wallet,
)

__all__ = [
    "format_portfolio_metrics",
    "format_token_analysis",
    "format_wallet_analysis",
    "validate_solana_address",
    "validate_token",
    "validate_wallet",
]
