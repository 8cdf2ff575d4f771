"""Local run records: the conversion ledger and the error log."""

from tubecast.history.error_log import ErrorLog
from tubecast.history.ledger import MAX_ENTRIES, HistoryLedger
from tubecast.history.models import HistoryEntry

__all__ = ["ErrorLog", "HistoryEntry", "HistoryLedger", "MAX_ENTRIES"]
