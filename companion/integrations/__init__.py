from companion.integrations.ledger_client import LedgerClient

__all__ = ["LedgerClient"]
