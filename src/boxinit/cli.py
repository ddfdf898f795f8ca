"""
boxinit CLI - container entrypoint.

Usage:
    boxinit --user NAME --uid UID --gid GID --home PATH [OPTIONS] [-- INIT_HOOK...]

Runs once as the container's first process, as root.  Sets up the host
user inside the container, bridges host resources, prints
``container_setup_done`` and then idles or execs the init system.
"""

import asyncio
import os
from typing import List, Optional

import typer

from . import __version__
from .config import load_config
from .constants import DEFAULT_SHELL, EXIT_INVALID_FLAG, EXIT_MISSING_ARGUMENT
from .context import ExecutionContext
from .decorators import report_bootstrap_errors
from .output import out, setup_logging
from .service import BootstrapService

# Usage errors come from whichever click typer is built on
_UsageError = typer.BadParameter.__mro__[1]


app = typer.Typer(
    name="boxinit",
    help="Bootstrap a container into a host-integrated login environment",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        out.info(f"boxinit version {__version__}")
        raise typer.Exit()


@app.command()
@report_bootstrap_errors
def bootstrap(
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="Name of the user to set up (required)",
    ),
    uid: Optional[int] = typer.Option(
        None, "--uid", help="Numeric user id of the host user (required)",
    ),
    gid: Optional[int] = typer.Option(
        None, "--gid", help="Numeric group id of the host user (required)",
    ),
    home: Optional[str] = typer.Option(
        None, "--home", "-d", help="Home directory of the user (required)",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        "-I",
        help="Hand off to the init system instead of idling once set up",
    ),
    pre_init_hooks: Optional[str] = typer.Option(
        None,
        "--pre-init-hooks",
        help="Command line to run before dependencies are installed",
    ),
    additional_packages: Optional[List[str]] = typer.Option(
        None,
        "--additional-packages",
        help="Extra packages to install, space separated (repeatable)",
    ),
    upgrade: bool = typer.Option(
        False, "--upgrade", help="Upgrade all installed packages first",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug output",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    init_hook: Optional[List[str]] = typer.Argument(
        None, help="Command line to run after setup, given after --",
    ),
) -> None:
    """Set up the container for USER and keep it running.

    The host user is created (or updated) with the given ids, home and
    the shell named by $SHELL.  If that shell can't be installed,
    /bin/bash is used instead.
    """
    required = (("--user", user), ("--uid", uid), ("--gid", gid), ("--home", home))
    missing = [flag for flag, value in required if value is None]
    if missing:
        out.error(f"missing required argument: {', '.join(missing)}")
        out.hint("Run: [bold]boxinit --help[/bold]")
        raise typer.Exit(EXIT_MISSING_ARGUMENT)

    setup_logging(verbose)

    execution = ExecutionContext(
        username=user,
        uid=uid,
        gid=gid,
        home=home,
        shell=os.environ.get("SHELL") or DEFAULT_SHELL,
        init=init,
        init_hook=" ".join(init_hook) if init_hook else None,
        pre_init_hook=pre_init_hooks or None,
        additional_packages=tuple(
            pkg for value in additional_packages or [] for pkg in value.split()
        ),
        upgrade=upgrade,
    )

    service = BootstrapService(load_config(), progress=out)
    raise typer.Exit(asyncio.run(service.run(execution)))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return its exit status.

    Usage errors are mapped onto our own statuses: an unknown flag or
    bad value is 1, a missing required argument is 2.
    """
    prog_name = os.environ.get("BOXINIT_PROG_NAME", "boxinit")
    try:
        rv = app(args=argv, prog_name=prog_name, standalone_mode=False)
    except _UsageError as e:
        e.show()
        return EXIT_INVALID_FLAG
    return rv if isinstance(rv, int) else 0


def cli() -> None:
    """CLI entry point for setuptools."""
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
