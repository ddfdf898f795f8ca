"""Entry point for running the agent as a module.

Usage:
    python -m boxinit --user alice --uid 1000 --gid 1000 --home /home/alice
"""

from .cli import cli

if __name__ == "__main__":
    cli()
