"""
Input validation for wallets and tokens.

Solana addresses:
- Use base58 encoding (no 0, O, I, l characters)
- Decode to exactly 32 bytes
- Typically 32-44 characters when encoded

Numeric fields must be finite and non-negative where the data model
requires it. Failures raise InvalidInputError.
"""

import math

import base58

from insight.core.exceptions import InvalidInputError
from insight.core.models import Token, Wallet


def validate_solana_address(address: str) -> tuple[bool, str | None]:
    """
    Validate a Solana address.

    Performs actual base58 decoding to verify the address is valid.
    This is more reliable than regex because it catches invalid
    characters and wrong decoded lengths.

    Args:
        address: String to validate as Solana address

    Returns:
        Tuple of (is_valid, error_message)
        - (True, None) if address is valid
        - (False, "error description") if invalid

    Examples:
        >>> validate_solana_address("So11111111111111111111111111111111111111112")
        (True, None)

        >>> validate_solana_address("")
        (False, 'Address must not be empty')
    """
    # Check empty input
    if not address:
        return False, "Address must not be empty"

    # Check for whitespace
    if address != address.strip():
        return False, "Address contains whitespace"

    # Quick length check (Solana addresses are 32-44 chars)
    if len(address) < 32 or len(address) > 44:
        return False, f"Invalid address length: {len(address)} characters (expected 32-44)"

    # Try to decode base58
    try:
        decoded = base58.b58decode(address)
    except ValueError:
        # base58 library raises ValueError for invalid characters
        return False, "Invalid base58 encoding"

    # Verify decoded length is exactly 32 bytes
    if len(decoded) != 32:
        return False, f"Invalid length: expected 32 bytes, got {len(decoded)}"

    return True, None


def _require_address(address: str, field: str) -> None:
    valid, error = validate_solana_address(address)
    if not valid:
        raise InvalidInputError(
            message=f"Invalid {field}.",
            technical_message=f"Invalid {field} {address!r}: {error}",
        )


def _require_non_negative(value: float, field: str) -> None:
    if not math.isfinite(value) or value < 0:
        raise InvalidInputError(
            message=f"Invalid {field}.",
            technical_message=f"{field} must be a finite number >= 0, got {value!r}",
        )


def validate_wallet(wallet: Wallet) -> None:
    """
    Check a wallet before analysis.

    Validates the wallet address, every holding's token address, and that
    amounts and USD values are finite and non-negative.

    Raises:
        InvalidInputError: On the first invalid field
    """
    _require_address(wallet.address, "wallet address")
    for balance in wallet.tokens:
        _require_address(balance.token_address, "token address")
        _require_non_negative(balance.amount, "token amount")
        _require_non_negative(balance.value_usd, "token value")


def validate_token(token: Token) -> None:
    """
    Check a token before analysis.

    Raises:
        InvalidInputError: On an invalid address or negative price/volume
    """
    _require_address(token.address, "token address")
    _require_non_negative(token.price_usd, "token price")
    _require_non_negative(token.volume_24h, "token volume")
