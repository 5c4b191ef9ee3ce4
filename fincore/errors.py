from typing import Optional

VALIDATION_ERROR = "validation_error"
DOMAIN_UNDEFINED = "domain_undefined"


def validation_error(field: str, message: str, **extra) -> dict:
    return {"error": VALIDATION_ERROR, "field": field, "message": message, **extra}


def domain_undefined(message: str, **extra) -> dict:
    return {"error": DOMAIN_UNDEFINED, "message": message, **extra}


class FinanceError(Exception):
    """Base class for errors raised at the data-access boundary."""

    def __init__(self, message: str, detail: Optional[dict] = None):
        super().__init__(message)
        self.detail = detail or {}


class ValidationError(FinanceError):
    """Input was missing, malformed or conflicts with existing records."""

    @classmethod
    def from_detail(cls, detail: dict) -> "ValidationError":
        return cls(detail.get("message", "invalid input"), detail)

    @property
    def field(self) -> Optional[str]:
        return self.detail.get("field")


class DomainUndefined(FinanceError):
    """Inputs are individually valid but their combination has no real solution."""

    @classmethod
    def from_detail(cls, detail: dict) -> "DomainUndefined":
        return cls(detail.get("message", "no real solution"), detail)


class MissingUserError(FinanceError):
    """No authenticated user id is available."""
