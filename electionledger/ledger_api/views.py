from dataclasses import asdict

from rest_framework import views, status
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from .models import LedgerEntry, verify_journal
from .permissions import IsLedgerGateway, get_principal
from .serializers import (
    AddCandidateSerializer,
    AuthorizeVotersSerializer,
    CandidateSerializer,
    CastVoteSerializer,
    ElectionDurationSerializer,
    ElectionEndedSerializer,
    ElectionStatsSerializer,
    PublicLedgerSerializer,
    RemoveVoteSerializer,
    TransferAdminSerializer,
    VoterStatusSerializer,
    WinnersSerializer,
)
from .services import get_ledger


# ---
# Helpers shared by the views and the dashboard consumer
# ---
def election_snapshot(ledger):
    """Stats plus the active candidate list, as sent to dashboards."""
    snapshot = ledger.get_snapshot()
    stats = asdict(snapshot.stats)
    stats['time_remaining'] = snapshot.time_remaining
    return {
        'stats': ElectionStatsSerializer(stats).data,
        'candidates': CandidateSerializer(snapshot.candidates, many=True).data,
    }


def voter_status(ledger, voter):
    record = ledger.get_voter_info(voter)
    return {
        'voter': voter,
        'is_authorized': ledger.is_voter_authorized(voter),
        **asdict(record),
    }


class GatewayView(views.APIView):
    """
    Base for every state-changing endpoint.
    The caller is whoever the gateway names in X-Principal.
    """
    permission_classes = [IsLedgerGateway]
    serializer_class = None

    def validated(self, request):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @property
    def principal(self):
        return get_principal(self.request)


# ---
# Voting endpoints
# ---
class CastVoteView(GatewayView):
    """
    Casts the caller's single ballot.
    Body: {"candidate_id": 2}
    """
    serializer_class = CastVoteSerializer

    def post(self, request, *args, **kwargs):
        data = self.validated(request)
        ledger = get_ledger()
        ledger.vote(self.principal, data['candidate_id'])

        return Response(
            {"status": "success", "message": "Vote cast and confirmed.",
             "voter": VoterStatusSerializer(voter_status(ledger, self.principal)).data},
            status=status.HTTP_201_CREATED
        )


class RemoveVoteView(GatewayView):
    """
    Administrator-only reversal of a ballot cast in error.
    Body: {"voter": "alice"}
    """
    serializer_class = RemoveVoteSerializer

    def post(self, request, *args, **kwargs):
        data = self.validated(request)
        ledger = get_ledger()
        ledger.remove_vote(self.principal, data['voter'])

        return Response(
            {"status": "success", "message": "Vote removed.",
             "voter": VoterStatusSerializer(voter_status(ledger, data['voter'])).data},
            status=status.HTTP_200_OK
        )


class VoterStatusView(views.APIView):
    """
    Public lookup of a voter's record. Unknown voters get an empty record.
    """
    permission_classes = [AllowAny]

    def get(self, request, voter, *args, **kwargs):
        payload = voter_status(get_ledger(), voter)
        return Response(VoterStatusSerializer(payload).data)


# ---
# Admin endpoints
# ---
class AddCandidateView(GatewayView):
    serializer_class = AddCandidateSerializer

    def post(self, request, *args, **kwargs):
        data = self.validated(request)
        candidate = get_ledger().add_candidate(self.principal, data['name'], data['description'])
        return Response(CandidateSerializer(candidate).data, status=status.HTTP_201_CREATED)


class DeactivateCandidateView(GatewayView):

    def post(self, request, candidate_id, *args, **kwargs):
        candidate = get_ledger().deactivate_candidate(self.principal, candidate_id)
        return Response(CandidateSerializer(candidate).data, status=status.HTTP_200_OK)


class AuthorizeVotersView(GatewayView):
    """
    Authorizes one voter or a batch.
    Body: {"voter": "alice"} or {"voters": ["alice", "bob"]}
    """
    serializer_class = AuthorizeVotersSerializer

    def post(self, request, *args, **kwargs):
        data = self.validated(request)
        count = get_ledger().authorize_voters(self.principal, data['voter_list'])
        return Response(
            {"status": "success", "message": f"Authorized {count} voter(s).", "count": count},
            status=status.HTTP_200_OK
        )


class ElectionDurationView(GatewayView):
    serializer_class = ElectionDurationSerializer

    def post(self, request, *args, **kwargs):
        data = self.validated(request)
        end_time = get_ledger().set_election_duration(self.principal, data['duration_hours'])
        return Response({"status": "success", "end_time": end_time}, status=status.HTTP_200_OK)


class TransferAdminView(GatewayView):
    serializer_class = TransferAdminSerializer

    def post(self, request, *args, **kwargs):
        data = self.validated(request)
        administrator = get_ledger().transfer_admin(self.principal, data['new_admin'])
        return Response({"status": "success", "administrator": administrator}, status=status.HTTP_200_OK)


class EndElectionView(GatewayView):

    def post(self, request, *args, **kwargs):
        event = get_ledger().end_election(self.principal)
        return Response(ElectionEndedSerializer(event).data, status=status.HTTP_200_OK)


class CheckElectionEndView(GatewayView):
    """
    Closes the election if its end time has passed.
    Any principal may call this; schedulers poll it.
    """

    def post(self, request, *args, **kwargs):
        event = get_ledger().check_and_end_election()
        return Response(ElectionEndedSerializer(event).data, status=status.HTTP_200_OK)


# ---
# Public read-only endpoints (for the dashboard)
# ---
class CandidateListView(views.APIView):
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        candidates = get_ledger().get_all_candidates()
        return Response(CandidateSerializer(candidates, many=True).data)


class CandidateDetailView(views.APIView):
    permission_classes = [AllowAny]

    def get(self, request, candidate_id, *args, **kwargs):
        candidate = get_ledger().get_candidate(candidate_id)
        return Response(CandidateSerializer(candidate).data)


class ElectionStatsView(views.APIView):
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        return Response(election_snapshot(get_ledger())['stats'])


class WinnersView(views.APIView):
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        winners = get_ledger().get_winners()
        return Response(WinnersSerializer(winners).data)


class PublicLedgerView(views.APIView):
    """
    The full journal, plus whether its hash chain is intact.
    """
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        entries = LedgerEntry.objects.order_by('id')
        broken_entry = verify_journal()
        return Response({
            'intact': broken_entry is None,
            'first_broken_entry': broken_entry,
            'entries': PublicLedgerSerializer(entries, many=True).data,
        })
