"""ccpm - Claude Code Plugin Manager.

Manages multiple plugin marketplaces on top of `claude plugin`.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
