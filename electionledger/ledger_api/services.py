"""
The process-wide election ledger, built from Django settings on first use.
"""
import logging
import threading

from django.conf import settings

from .clock import SystemClock
from .events import CompositeEventSink
from .ledger import ElectionLedger
from .sinks import ChannelsEventSink, JournalEventSink

logger = logging.getLogger(__name__)

_ledger = None
_ledger_lock = threading.Lock()


def build_ledger(config=None, clock=None, sink=None):
    """Create a ledger from an `ELECTION_LEDGER`-style dict."""
    config = dict(settings.ELECTION_LEDGER if config is None else config)
    if sink is None:
        sink = CompositeEventSink(JournalEventSink(), ChannelsEventSink())

    return ElectionLedger(
        administrator=config.get('ADMINISTRATOR'),
        title=config.get('TITLE', ''),
        description=config.get('DESCRIPTION', ''),
        require_authorization=config.get('REQUIRE_AUTHORIZATION', False),
        clock=clock or SystemClock(),
        sink=sink,
    )


def get_ledger():
    global _ledger
    if _ledger is None:
        with _ledger_lock:
            if _ledger is None:
                _ledger = build_ledger()
    return _ledger


def set_ledger(ledger):
    """Install an already-built ledger, e.g. one with a test clock."""
    global _ledger
    with _ledger_lock:
        _ledger = ledger
    return ledger


def reset_ledger():
    set_ledger(None)
