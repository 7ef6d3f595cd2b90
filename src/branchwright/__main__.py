"""Allow running branchwright as ``python -m branchwright``."""

from branchwright.cli import cli_main

if __name__ == "__main__":
    cli_main()
