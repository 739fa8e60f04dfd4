"""
The election ledger state machine.

One `ElectionLedger` instance is one election. Every mutating operation
validates all of its preconditions and applies all of its effects inside a
single critical section, so concurrent callers always observe some total
order of operations. Committed events are queued in that same order and
handed to the event sink after the state lock has been released.
"""
import logging
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, replace

from . import errors
from .clock import SystemClock
from .events import (
    CandidateAdded,
    CandidateDeactivated,
    CompositeEventSink,
    ElectionEnded,
    NullEventSink,
    VoteCast,
    VoterAuthorized,
)

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600
ZERO_ADDRESS = "0x" + "0" * 40


def is_null_principal(principal):
    """True for a missing, blank, or all-zero principal identifier."""
    if principal is None:
        return True
    value = str(principal).strip()
    return value == "" or value.lower() == ZERO_ADDRESS


# --- Records ---
# Records are immutable. The ledger swaps in a new record on every change,
# so a reader holding an old one never sees it half-updated.

@dataclass(frozen=True)
class Candidate:
    candidate_id: int
    name: str
    description: str = ""
    vote_count: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class Voter:
    is_registered: bool = False
    has_voted: bool = False
    voted_for: int = 0
    vote_timestamp: int = 0


UNKNOWN_VOTER = Voter()


@dataclass(frozen=True)
class Winners:
    candidate_ids: tuple
    winning_votes: int

    @property
    def winner_count(self):
        return len(self.candidate_ids)


@dataclass(frozen=True)
class ElectionStats:
    title: str
    description: str
    administrator: str
    require_authorization: bool
    start_time: int
    end_time: int
    duration: int
    total_candidates: int
    active_candidates: int
    total_votes: int
    is_active: bool
    ended: bool


@dataclass(frozen=True)
class ElectionSnapshot:
    stats: ElectionStats
    time_remaining: int
    candidates: list


class _Delivery:
    """One sink and the events it has not received yet."""

    def __init__(self, sink):
        self.sink = sink
        self.outbox = deque()


class ElectionLedger:
    """
    Holds one election: its candidates, voters and tally.

    `clock` is any zero-argument callable returning POSIX seconds. It is only
    consulted when an operation is called without an explicit `now`.
    `sink` receives every committed event (see `ledger_api.events`). Each
    member of a `CompositeEventSink` gets its own outbox, so one failing
    member neither blocks nor replays events to the others.
    """

    def __init__(self, administrator, title, description="", require_authorization=False,
                 clock=None, sink=None, start_time=None):
        if is_null_principal(administrator):
            raise errors.InvalidAddress("The election administrator must be a valid principal.")

        self._clock = clock or SystemClock()
        sink = sink or NullEventSink()
        sinks = sink.sinks if isinstance(sink, CompositeEventSink) else [sink]

        # State lock guards every field below; dispatch lock serializes delivery.
        self._lock = threading.RLock()
        self._dispatch_lock = threading.Lock()
        self._deliveries = [_Delivery(member) for member in sinks]

        self.title = title
        self.description = description
        self.require_authorization = bool(require_authorization)
        self.start_time = self._clock() if start_time is None else int(start_time)

        self._administrator = administrator
        self._end_time = 0
        self._ended = False
        self._total_votes = 0
        self._candidates = {}
        self._voters = {}
        self._authorized = set()

        logger.info(
            "ledger_created title=%s administrator=%s require_authorization=%s start_time=%d",
            title, administrator, self.require_authorization, self.start_time,
        )

    # ---
    # Internal helpers
    # ---
    def _now(self, now):
        return self._clock() if now is None else int(now)

    @contextmanager
    def _commit(self):
        try:
            with self._lock:
                yield
        except errors.LedgerError as exc:
            logger.debug("ledger_rejected error=%s", exc.kind)
            raise
        self.flush_events()

    def _publish(self, event):
        # Caller must hold self._lock.
        for delivery in self._deliveries:
            delivery.outbox.append(event)

    def _is_active(self, now):
        return not self._ended and (self._end_time == 0 or now <= self._end_time)

    def _require_admin(self, caller):
        if caller != self._administrator:
            raise errors.Unauthorized()

    def _require_active(self, now):
        if not self._is_active(now):
            raise errors.ElectionClosed()

    def _require_not_ended(self):
        if self._ended:
            raise errors.ElectionClosed()

    def _require_candidate(self, candidate_id):
        candidate = self._candidates.get(candidate_id)
        if candidate is None:
            raise errors.InvalidCandidate(f"Candidate {candidate_id!r} does not exist.")
        return candidate

    # ---
    # Event delivery
    # ---
    @property
    def pending_events(self):
        """Events not yet delivered to every sink."""
        return max((len(delivery.outbox) for delivery in self._deliveries), default=0)

    def flush_events(self):
        """
        Deliver queued events to each sink in commit order.

        Returns False if any sink raised. The failed event stays queued for
        that sink only and is re-delivered by the next flush.
        """
        delivered = True
        with self._dispatch_lock:
            for delivery in self._deliveries:
                delivered = self._drain(delivery) and delivered
        return delivered

    def _drain(self, delivery):
        # Caller must hold self._dispatch_lock.
        outbox = delivery.outbox
        while outbox:
            event = outbox[0]
            try:
                delivery.sink.emit(event)
            except Exception:
                logger.exception(
                    "ledger_event_delivery_failed sink=%s event=%s pending=%d",
                    type(delivery.sink).__name__, event.event_type, len(outbox),
                )
                return False
            outbox.popleft()
        return True

    # ---
    # Administrative operations
    # ---
    def set_election_duration(self, caller, duration_hours, now=None):
        if isinstance(duration_hours, bool) or not isinstance(duration_hours, int) or duration_hours < 1:
            raise ValueError(f"duration_hours must be a positive whole number, got {duration_hours!r}")
        now = self._now(now)
        with self._commit():
            self._require_admin(caller)
            self._require_not_ended()
            end_time = now + duration_hours * SECONDS_PER_HOUR
            self._end_time = end_time
            logger.info("election_duration_set hours=%s end_time=%d", duration_hours, end_time)
        return end_time

    def authorize_voter(self, caller, voter):
        return self.authorize_voters(caller, [voter])

    def authorize_voters(self, caller, voters):
        """Authorize each voter. Re-authorizing is harmless and still emits an event."""
        voters = list(voters)
        with self._commit():
            self._require_admin(caller)
            if any(not isinstance(voter, str) or is_null_principal(voter) for voter in voters):
                raise errors.InvalidAddress("Voter identifiers must be valid principals.")

            for voter in voters:
                self._authorized.add(voter)
                record = self._voters.get(voter, UNKNOWN_VOTER)
                if not record.is_registered:
                    self._voters[voter] = replace(record, is_registered=True)
                self._publish(VoterAuthorized(voter=voter))
            logger.info("voters_authorized count=%d", len(voters))
        return len(voters)

    def add_candidate(self, caller, name, description="", now=None):
        now = self._now(now)
        with self._commit():
            self._require_admin(caller)
            self._require_active(now)
            candidate = Candidate(
                candidate_id=len(self._candidates) + 1,
                name=name,
                description=description,
            )
            self._candidates[candidate.candidate_id] = candidate
            self._publish(CandidateAdded(candidate_id=candidate.candidate_id, name=name))
            logger.info("candidate_added candidate_id=%d name=%s", candidate.candidate_id, name)
        return candidate

    def deactivate_candidate(self, caller, candidate_id):
        with self._commit():
            self._require_admin(caller)
            self._require_not_ended()
            candidate = self._require_candidate(candidate_id)
            if candidate.is_active:
                candidate = replace(candidate, is_active=False)
                self._candidates[candidate_id] = candidate
            self._publish(CandidateDeactivated(candidate_id=candidate_id))
            logger.info("candidate_deactivated candidate_id=%d", candidate_id)
        return candidate

    def transfer_admin(self, caller, new_admin):
        with self._commit():
            self._require_admin(caller)
            if is_null_principal(new_admin):
                raise errors.InvalidAddress("The new administrator must be a valid principal.")
            previous, self._administrator = self._administrator, new_admin
            logger.info("admin_transferred previous=%s new=%s", previous, new_admin)
        return new_admin

    def end_election(self, caller, now=None):
        """Close the election immediately, whatever its end time says."""
        now = self._now(now)
        with self._commit():
            self._require_admin(caller)
            self._ended = True
            event = ElectionEnded(timestamp=now, total_votes=self._total_votes)
            self._publish(event)
            logger.info("election_ended by=admin timestamp=%d total_votes=%d", now, self._total_votes)
        return event

    def check_and_end_election(self, now=None):
        """
        Persist the ended state of an election whose end time has passed.
        Anyone may call this; nothing calls it automatically.
        """
        now = self._now(now)
        with self._commit():
            if self._end_time == 0:
                raise errors.DurationNotSet()
            if now <= self._end_time:
                raise errors.DurationNotExpired()
            if self._ended:
                raise errors.AlreadyEnded()
            self._ended = True
            event = ElectionEnded(timestamp=now, total_votes=self._total_votes)
            self._publish(event)
            logger.info("election_ended by=expiry timestamp=%d total_votes=%d", now, self._total_votes)
        return event

    # ---
    # Voting operations
    # ---
    def vote(self, caller, candidate_id, now=None):
        now = self._now(now)
        with self._commit():
            # 1. Election must be open
            self._require_active(now)

            # 2. Voter must be on the authorized list, if there is one
            if self.require_authorization and caller not in self._authorized:
                raise errors.NotAuthorized()

            # 3. One ballot per voter
            record = self._voters.get(caller, UNKNOWN_VOTER)
            if record.has_voted:
                raise errors.AlreadyVoted()

            # 4. Candidate must exist and still be running
            candidate = self._require_candidate(candidate_id)
            if not candidate.is_active:
                raise errors.CandidateInactive()

            self._candidates[candidate_id] = replace(candidate, vote_count=candidate.vote_count + 1)
            record = Voter(is_registered=True, has_voted=True, voted_for=candidate_id, vote_timestamp=now)
            self._voters[caller] = record
            self._total_votes += 1
            self._publish(VoteCast(voter=caller, candidate_id=candidate_id, timestamp=now))
            logger.info("vote_cast candidate_id=%d total_votes=%d", candidate_id, self._total_votes)
        return record

    def remove_vote(self, caller, voter, now=None):
        """
        Reverse a ballot cast in error. Only the administrator may do this,
        and only while the election is still open.

        The voter's `vote_timestamp` is left in place as a trace of the
        removed ballot.
        """
        now = self._now(now)
        with self._commit():
            self._require_admin(caller)
            self._require_active(now)
            record = self._voters.get(voter, UNKNOWN_VOTER)
            if not record.has_voted:
                raise errors.VoterHasNotVoted()

            candidate = self._candidates[record.voted_for]
            self._candidates[candidate.candidate_id] = replace(candidate, vote_count=candidate.vote_count - 1)
            record = replace(record, has_voted=False, voted_for=0)
            self._voters[voter] = record
            self._total_votes -= 1
            logger.warning(
                "vote_removed voter=%s candidate_id=%d total_votes=%d",
                voter, candidate.candidate_id, self._total_votes,
            )
        return record

    # ---
    # Queries
    # ---
    @property
    def administrator(self):
        with self._lock:
            return self._administrator

    @property
    def end_time(self):
        with self._lock:
            return self._end_time

    @property
    def ended(self):
        with self._lock:
            return self._ended

    @property
    def total_votes(self):
        with self._lock:
            return self._total_votes

    @property
    def candidates_count(self):
        with self._lock:
            return len(self._candidates)

    def get_all_candidates(self):
        """Active candidates, in ascending identifier order."""
        with self._lock:
            return [candidate for candidate in self._candidates.values() if candidate.is_active]

    def get_candidate(self, candidate_id):
        with self._lock:
            return self._require_candidate(candidate_id)

    def get_winners(self):
        """
        Candidates with the most votes among those still active.
        Ties return every tied candidate; no active candidates returns none.
        """
        with self._lock:
            if not self._ended:
                raise errors.ElectionNotEnded()
            active = [candidate for candidate in self._candidates.values() if candidate.is_active]

        winning_votes = 0
        for candidate in active:
            if candidate.vote_count > winning_votes:
                winning_votes = candidate.vote_count

        winners = tuple(
            candidate.candidate_id for candidate in active
            if candidate.vote_count == winning_votes
        )
        return Winners(candidate_ids=winners, winning_votes=winning_votes)

    def get_voter_info(self, voter):
        with self._lock:
            return self._voters.get(voter, UNKNOWN_VOTER)

    def has_user_voted(self, voter):
        return self.get_voter_info(voter).has_voted

    def is_voter_authorized(self, voter):
        with self._lock:
            return voter in self._authorized

    def get_election_stats(self, now=None):
        now = self._now(now)
        with self._lock:
            end_time = self._end_time
            return ElectionStats(
                title=self.title,
                description=self.description,
                administrator=self._administrator,
                require_authorization=self.require_authorization,
                start_time=self.start_time,
                end_time=end_time,
                duration=end_time - self.start_time if end_time > self.start_time else 0,
                total_candidates=len(self._candidates),
                active_candidates=sum(1 for c in self._candidates.values() if c.is_active),
                total_votes=self._total_votes,
                is_active=self._is_active(now),
                ended=self._ended,
            )

    def get_time_remaining(self, now=None):
        now = self._now(now)
        with self._lock:
            if self._ended or self._end_time == 0 or now >= self._end_time:
                return 0
            return self._end_time - now

    def get_snapshot(self, now=None):
        """Stats, time remaining and active candidates, all read at one instant."""
        now = self._now(now)
        with self._lock:
            return ElectionSnapshot(
                stats=self.get_election_stats(now=now),
                time_remaining=self.get_time_remaining(now=now),
                candidates=self.get_all_candidates(),
            )
