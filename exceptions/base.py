"""
Root of the storefront exception hierarchy.
"""


class StorefrontException(Exception):
    """
    Base class for every error raised by the storefront services.

    The message is meant for the customer or shop operator as-is; details carries
    machine-readable context (product ids, error codes, deducted quantities) for
    logging and for callers that need to branch on it.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        parts = [repr(self.message)] + [f"{key}={value!r}" for key, value in self.details.items()]
        return f"{type(self).__name__}({', '.join(parts)})"
