"""Service layer helpers"""

from .engine import NLTEService, get_nlte_service

__all__ = [
    "NLTEService",
    "get_nlte_service",
]
