"""Decorators for CLI commands."""

from functools import wraps
from typing import Callable, TypeVar

import typer

from .errors import BootstrapError
from .output import out

R = TypeVar("R")


def report_bootstrap_errors(func: Callable[..., R]) -> Callable[..., R]:
    """Decorator that turns a BootstrapError into its exit status."""
    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> R:
        try:
            return func(*args, **kwargs)
        except BootstrapError as e:
            out.error(str(e))
            raise typer.Exit(e.exit_code)
    return wrapper
