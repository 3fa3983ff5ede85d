# shoplens/core/errors.py


class ShoplensError(Exception):
    """Base class for errors raised by shoplens."""


class InvalidPrecondition(ShoplensError, ValueError):
    """
    A caller broke an input contract of the ranking/aggregation core
    (negative or NaN budget, NaN similarity, inverted time window, ...).
    Raised immediately, never replaced by a default.
    """
