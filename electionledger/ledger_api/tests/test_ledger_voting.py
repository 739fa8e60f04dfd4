from django.test import SimpleTestCase

from ledger_api import errors
from ledger_api.events import VoteCast
from ledger_api.ledger import Voter
from ledger_api.tests.helpers import (
    ADMIN,
    HOUR,
    T0,
    add_candidates,
    assert_tally_consistent,
    make_ledger,
)


class VoteTests(SimpleTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ledger, self.clock, self.sink = make_ledger()
        add_candidates(self.ledger, "Alice", "Bob", "Carol")

    def test_vote_updates_tally_and_voter_record(self) -> None:
        self.clock.advance(seconds=5)

        record = self.ledger.vote("v1", 2)

        self.assertEqual(
            record,
            Voter(is_registered=True, has_voted=True, voted_for=2, vote_timestamp=T0 + 5),
        )
        self.assertEqual(self.ledger.get_voter_info("v1"), record)
        self.assertEqual(self.ledger.get_candidate(2).vote_count, 1)
        self.assertEqual(self.ledger.total_votes, 1)
        self.assertEqual(self.sink.of_type(VoteCast), [VoteCast(voter="v1", candidate_id=2, timestamp=T0 + 5)])

    def test_explicit_time_overrides_clock(self) -> None:
        record = self.ledger.vote("v1", 1, now=T0 + 42)
        self.assertEqual(record.vote_timestamp, T0 + 42)

    def test_second_vote_is_rejected(self) -> None:
        self.ledger.vote("v1", 1)
        with self.assertRaises(errors.AlreadyVoted):
            self.ledger.vote("v1", 2)

        self.assertEqual(self.ledger.get_candidate(2).vote_count, 0)
        self.assertEqual(self.ledger.total_votes, 1)

    def test_invalid_candidate(self) -> None:
        for candidate_id in (0, 4, -1, "1"):
            with self.subTest(candidate_id=candidate_id):
                with self.assertRaises(errors.InvalidCandidate):
                    self.ledger.vote("v1", candidate_id)
        self.assertFalse(self.ledger.has_user_voted("v1"))
        self.assertEqual(self.sink.of_type(VoteCast), [])

    def test_inactive_candidate(self) -> None:
        self.ledger.deactivate_candidate(ADMIN, 3)
        with self.assertRaises(errors.CandidateInactive):
            self.ledger.vote("v1", 3)
        self.assertEqual(self.ledger.total_votes, 0)

    def test_rejected_after_end(self) -> None:
        self.ledger.end_election(ADMIN)
        with self.assertRaises(errors.ElectionClosed):
            self.ledger.vote("v1", 1)

    def test_vote_at_end_time_is_accepted(self) -> None:
        self.ledger.set_election_duration(ADMIN, 1)
        self.ledger.vote("v1", 1, now=T0 + HOUR)
        self.assertEqual(self.ledger.total_votes, 1)

    def test_expired_window_closes_voting_before_ended_flag_is_set(self) -> None:
        self.ledger.set_election_duration(ADMIN, 1)

        with self.assertRaises(errors.ElectionClosed):
            self.ledger.vote("v1", 1, now=T0 + 2 * HOUR)
        self.assertFalse(self.ledger.ended)

        self.ledger.check_and_end_election(now=T0 + 2 * HOUR)
        self.assertTrue(self.ledger.ended)

    def test_closed_is_reported_before_other_failures(self) -> None:
        self.ledger.vote("v1", 1)
        self.ledger.end_election(ADMIN)
        # Already voted and invalid candidate too, but closed comes first.
        with self.assertRaises(errors.ElectionClosed):
            self.ledger.vote("v1", 99)

    def test_already_voted_is_reported_before_invalid_candidate(self) -> None:
        self.ledger.vote("v1", 1)
        with self.assertRaises(errors.AlreadyVoted):
            self.ledger.vote("v1", 99)


class AuthorizationGateTests(SimpleTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ledger, _, _ = make_ledger(require_authorization=True)
        add_candidates(self.ledger, "Alice", "Bob")

    def test_unauthorized_voter_is_rejected_until_authorized(self) -> None:
        with self.assertRaises(errors.NotAuthorized):
            self.ledger.vote("v1", 1)
        self.assertEqual(self.ledger.total_votes, 0)

        self.ledger.authorize_voter(ADMIN, "v1")
        self.ledger.vote("v1", 1)

        self.assertTrue(self.ledger.has_user_voted("v1"))

    def test_not_authorized_is_reported_before_invalid_candidate(self) -> None:
        with self.assertRaises(errors.NotAuthorized):
            self.ledger.vote("v1", 99)

    def test_open_election_ignores_authorized_list(self) -> None:
        ledger, _, _ = make_ledger(require_authorization=False)
        add_candidates(ledger, "Alice")
        ledger.vote("anyone", 1)
        self.assertEqual(ledger.total_votes, 1)


class RemoveVoteTests(SimpleTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ledger, self.clock, self.sink = make_ledger()
        add_candidates(self.ledger, "Alice", "Bob")

    def test_reversal_restores_tally_and_allows_new_vote(self) -> None:
        self.ledger.vote("v0", 1)
        before_total = self.ledger.total_votes
        before_count = self.ledger.get_candidate(1).vote_count

        self.ledger.vote("v1", 1, now=T0 + 10)
        record = self.ledger.remove_vote(ADMIN, "v1")

        self.assertEqual(self.ledger.total_votes, before_total)
        self.assertEqual(self.ledger.get_candidate(1).vote_count, before_count)
        self.assertFalse(record.has_voted)
        self.assertEqual(record.voted_for, 0)
        self.assertTrue(record.is_registered)
        # The timestamp of the removed ballot stays as a trace.
        self.assertEqual(record.vote_timestamp, T0 + 10)

        self.ledger.vote("v1", 2, now=T0 + 20)
        self.assertEqual(self.ledger.get_candidate(2).vote_count, 1)
        self.assertEqual(self.ledger.get_voter_info("v1").vote_timestamp, T0 + 20)
        assert_tally_consistent(self, self.ledger, ["v0", "v1"])

    def test_non_admin_is_rejected(self) -> None:
        self.ledger.vote("v1", 1)
        with self.assertRaises(errors.Unauthorized):
            self.ledger.remove_vote("v1", "v1")
        self.assertTrue(self.ledger.has_user_voted("v1"))

    def test_voter_without_vote(self) -> None:
        with self.assertRaises(errors.VoterHasNotVoted):
            self.ledger.remove_vote(ADMIN, "nobody")

    def test_rejected_after_end(self) -> None:
        self.ledger.vote("v1", 1)
        self.ledger.end_election(ADMIN)

        with self.assertRaises(errors.ElectionClosed):
            self.ledger.remove_vote(ADMIN, "v1")
        self.assertEqual(self.ledger.get_candidate(1).vote_count, 1)

    def test_rejected_after_window_expired(self) -> None:
        self.ledger.set_election_duration(ADMIN, 1)
        self.ledger.vote("v1", 1)
        self.clock.advance(hours=2)

        with self.assertRaises(errors.ElectionClosed):
            self.ledger.remove_vote(ADMIN, "v1")

    def test_emits_no_event(self) -> None:
        self.ledger.vote("v1", 1)
        delivered = len(self.sink.events)
        self.ledger.remove_vote(ADMIN, "v1")
        self.assertEqual(len(self.sink.events), delivered)


class TallyConsistencyTests(SimpleTestCase):
    def test_totals_agree_through_mixed_operations(self) -> None:
        ledger, _, _ = make_ledger()
        add_candidates(ledger, "Alice", "Bob", "Carol")
        voters = [f"v{i}" for i in range(12)]

        for i, voter in enumerate(voters):
            ledger.vote(voter, i % 3 + 1)
            assert_tally_consistent(self, ledger, voters)

        ledger.deactivate_candidate(ADMIN, 2)
        assert_tally_consistent(self, ledger, voters)

        for voter in voters[:4]:
            ledger.remove_vote(ADMIN, voter)
            assert_tally_consistent(self, ledger, voters)

        self.assertEqual(ledger.total_votes, 8)
