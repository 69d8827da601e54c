class PosError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(PosError):
    status_code = 400


class ReferentialIntegrityError(PosError):
    status_code = 400


class NotFoundError(PosError):
    status_code = 404


class ConflictError(PosError):
    """Stale optimistic-concurrency token. Carries the current server row."""

    status_code = 409

    def __init__(self, current: dict, message: str = "Conflict: Server has a newer version"):
        super().__init__(message)
        self.current = current

    def to_dict(self) -> dict:
        return {"error": self.message, "current": self.current}


class CheckoutError(PosError):
    """Raised inside the checkout transaction; the whole sale is rolled back."""

    status_code = 500

    def __init__(self, reason: str):
        super().__init__("Checkout failed")
        self.reason = reason
