"""
Domain events emitted by the election ledger after each commit.

Sinks are plain callables-with-an-`emit` method. The ledger calls them
outside its state lock, in commit order.
"""
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class LedgerEvent:

    @property
    def event_type(self):
        return type(self).__name__

    def as_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class CandidateAdded(LedgerEvent):
    candidate_id: int
    name: str


@dataclass(frozen=True)
class VoteCast(LedgerEvent):
    voter: str
    candidate_id: int
    timestamp: int


@dataclass(frozen=True)
class ElectionEnded(LedgerEvent):
    timestamp: int
    total_votes: int


@dataclass(frozen=True)
class VoterAuthorized(LedgerEvent):
    voter: str


@dataclass(frozen=True)
class CandidateDeactivated(LedgerEvent):
    candidate_id: int


class EventSink:
    """Receives committed ledger events."""

    def emit(self, event):
        raise NotImplementedError


class NullEventSink(EventSink):

    def emit(self, event):
        pass


class CollectingEventSink(EventSink):
    """Keeps every delivered event in memory, in delivery order."""

    def __init__(self):
        self.events = []

    def emit(self, event):
        self.events.append(event)

    def of_type(self, event_class):
        return [event for event in self.events if isinstance(event, event_class)]


class CompositeEventSink(EventSink):
    """
    Fans each event out to several sinks, in the order they were given.
    `ElectionLedger` unpacks a composite and tracks delivery per member;
    calling `emit` directly stops at the first failing sink.
    """

    def __init__(self, *sinks):
        self.sinks = list(sinks)

    def emit(self, event):
        for sink in self.sinks:
            sink.emit(event)
