"""Trade engine error taxonomy.

Every error carries the HTTP status the API layer answers with. None of them
are retried inside the engine.
"""


class TradingError(Exception):
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class InvalidSignal(TradingError):
    """Malformed or incomplete signal payload."""
    status_code = 400


class Unauthorized(TradingError):
    """Missing or unknown credential (bearer token or webhook secret)."""
    status_code = 401


class TradeNotFound(TradingError):
    status_code = 404


class TradeAlreadyClosed(TradingError):
    """Close attempted on a trade already in a terminal status.

    Callers retrying a close command can treat this as a no-op.
    """
    status_code = 409


class InvalidSizing(TradingError):
    """Computed position parameters are non-positive or inconsistent."""
    status_code = 422


class InvalidPriceTick(TradingError):
    """Non-positive or non-finite price. The tick must be discarded."""
    status_code = 422


class DuplicateOrInvalid(TradingError):
    """Sized position is missing fields required to open a trade."""
    status_code = 422


class DailyTradeLimitReached(TradingError):
    status_code = 429


class TradeWriteConflict(TradingError):
    """Trade kept changing under concurrent writers; the command can be retried."""
    status_code = 409
