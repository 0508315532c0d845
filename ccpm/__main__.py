"""
ccpm - Claude Code Plugin Manager

A wrapper around `claude plugin` commands for managing multiple marketplaces.

Quick Start:
    pip install -e .
    ccpm discover
    ccpm upgrade
"""

from ccpm.cli.cli import main

if __name__ == "__main__":
    main()
