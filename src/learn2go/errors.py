"""Exception hierarchy shared by the store, auth and preload layers."""


class Learn2GoError(Exception):
    """Base class for application errors."""


class StoreError(Learn2GoError):
    """A read or write against the remote store failed."""

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidUsernameError(Learn2GoError):
    """Username does not satisfy the naming rules."""


class AuthenticationError(Learn2GoError):
    """Sign-in or sign-up was rejected."""
