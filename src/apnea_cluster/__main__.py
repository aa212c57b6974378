"""Entry point for ``python -m apnea_cluster``."""

from apnea_cluster.cli import cli

if __name__ == "__main__":
    cli()
