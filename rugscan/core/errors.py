"""Error taxonomy for scans."""


class ScanError(Exception):
    """Base class for scan failures surfaced to the user."""

    user_message = "Something went wrong. Try again."


class PairNotFoundError(ScanError):
    """Upstream has no live pair for the mint."""

    user_message = "No live pair found on Dexscreener for this mint."

    def __init__(self, mint: str):
        self.mint = mint
        super().__init__(f"No live pair for {mint}")


class TransportError(ScanError):
    """Upstream unreachable or returned a non-success status."""

    user_message = "Couldn't reach Dexscreener. Try again."

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedCacheError(ScanError):
    """A stored cache record could not be parsed."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed cache record for {key}: {reason}")


class InvalidMintError(ValueError):
    """Input is not a base58 Solana mint address."""

    user_message = "Enter a valid Solana mint (32-44 base58 chars)."
