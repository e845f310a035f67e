"""Allow running as ``python -m ec2_decom``."""

from .cli.main import cli_main

if __name__ == "__main__":
    cli_main()
