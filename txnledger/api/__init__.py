"""
txnledger API - the four-operation call boundary.
"""

from txnledger.api.boundary import ALIASES, LedgerService

__all__ = ["ALIASES", "LedgerService"]
