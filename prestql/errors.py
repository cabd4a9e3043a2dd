"""Exceptions raised while building and running queries."""


class PrestError(Exception):
    """Base class for every error raised by the package."""

    default_message = "prest error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class JoinInvalidNumberOfArgsError(PrestError, ValueError):
    default_message = "invalid number of arguments in join statement"


class InvalidIdentifierError(PrestError, ValueError):
    default_message = "invalid identifier"


class InvalidJoinClauseError(PrestError, ValueError):
    default_message = "invalid join clause"


class MustSelectOneFieldError(PrestError, ValueError):
    default_message = "you must select at least one field"


class NoTableNameError(PrestError, ValueError):
    default_message = "unable to find table name"


class InvalidOperatorError(PrestError, ValueError):
    default_message = "invalid operator"


class InvalidGroupFunctionError(PrestError, ValueError):
    default_message = "invalid group function"


class BodyEmptyError(PrestError, ValueError):
    """Raised when a request body carries no data."""

    default_message = "body is empty"


class EmptyOrInvalidSliceError(PrestError, ValueError):
    default_message = "empty or invalid slice"