"""
bingsy Decorators

Decorators shared by bingsy commands. Handlers raise their own exception types and never
print failures themselves; the command entry point is wrapped with @catch_errors so every
fatal error is reported the same way and the process exits with a non-zero status.
"""

from sys import exit
from functools import wraps

from bingsy.cli_utils.console import fail


def catch_errors(func):
    """
    Catch and format errors with the "fail" console template and gracefully
    exit the application with an error code.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as error:
            fail(str(error))
            exit(1)

    return wrapper
