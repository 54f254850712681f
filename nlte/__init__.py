"""Natural Language Transaction Engine for Celo."""

__version__ = "1.0.0"
