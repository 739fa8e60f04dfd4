from ledger_api.clock import FixedClock
from ledger_api.events import CollectingEventSink
from ledger_api.ledger import ElectionLedger

T0 = 1_767_225_600  # 2026-01-01T00:00:00Z
HOUR = 3600

ADMIN = "admin"


def make_ledger(require_authorization=False, now=T0, sink=None):
    clock = FixedClock(now)
    sink = sink if sink is not None else CollectingEventSink()
    ledger = ElectionLedger(
        administrator=ADMIN,
        title="Board election",
        description="Two seats, one round.",
        require_authorization=require_authorization,
        clock=clock,
        sink=sink,
    )
    return ledger, clock, sink


def add_candidates(ledger, *names):
    return [ledger.add_candidate(ADMIN, name, f"{name} for the board") for name in names]


def assert_tally_consistent(testcase, ledger, voters):
    total = ledger.total_votes
    counted = sum(ledger.get_candidate(i).vote_count for i in range(1, ledger.candidates_count + 1))
    voted = sum(1 for voter in voters if ledger.has_user_voted(voter))
    testcase.assertEqual(total, counted)
    testcase.assertEqual(total, voted)
