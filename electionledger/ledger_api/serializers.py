from rest_framework import serializers
from .models import LedgerEntry


# --- Serializers for voting requests ---

class CastVoteSerializer(serializers.Serializer):
    """
    Validates the body of a ballot. The voter is the X-Principal caller;
    whether the candidate exists is for the ledger to decide.
    """
    candidate_id = serializers.IntegerField()


class RemoveVoteSerializer(serializers.Serializer):
    voter = serializers.CharField()


# --- Serializers for admin requests ---

class AddCandidateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class AuthorizeVotersSerializer(serializers.Serializer):
    """
    Accepts either a single voter or a batch:
    {"voter": "alice"} or {"voters": ["alice", "bob", "..."]}
    """
    voter = serializers.CharField(required=False, allow_blank=True)
    voters = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        allow_empty=False,
    )

    def validate(self, data):
        has_single = 'voter' in data
        has_batch = 'voters' in data
        if has_single == has_batch:
            raise serializers.ValidationError("Provide exactly one of 'voter' or 'voters'.")

        data['voter_list'] = [data['voter']] if has_single else data['voters']
        return data


class ElectionDurationSerializer(serializers.Serializer):
    duration_hours = serializers.IntegerField(min_value=1)


class TransferAdminSerializer(serializers.Serializer):
    # Blank is let through so the ledger can reject it as an invalid principal.
    new_admin = serializers.CharField(allow_blank=True)


# --- Read-only serializers ---

class CandidateSerializer(serializers.Serializer):
    candidate_id = serializers.IntegerField()
    name = serializers.CharField()
    description = serializers.CharField()
    vote_count = serializers.IntegerField()
    is_active = serializers.BooleanField()


class VoterStatusSerializer(serializers.Serializer):
    voter = serializers.CharField()
    is_registered = serializers.BooleanField()
    has_voted = serializers.BooleanField()
    voted_for = serializers.IntegerField()
    vote_timestamp = serializers.IntegerField()
    is_authorized = serializers.BooleanField()


class WinnersSerializer(serializers.Serializer):
    candidate_ids = serializers.ListField(child=serializers.IntegerField())
    winning_votes = serializers.IntegerField()
    winner_count = serializers.IntegerField()


class ElectionStatsSerializer(serializers.Serializer):
    title = serializers.CharField()
    description = serializers.CharField()
    administrator = serializers.CharField()
    require_authorization = serializers.BooleanField()
    start_time = serializers.IntegerField()
    end_time = serializers.IntegerField()
    duration = serializers.IntegerField()
    total_candidates = serializers.IntegerField()
    active_candidates = serializers.IntegerField()
    total_votes = serializers.IntegerField()
    is_active = serializers.BooleanField()
    ended = serializers.BooleanField()
    time_remaining = serializers.IntegerField()


class ElectionEndedSerializer(serializers.Serializer):
    timestamp = serializers.IntegerField()
    total_votes = serializers.IntegerField()


class PublicLedgerSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for one journal entry.
    """
    entry_id = serializers.ReadOnlyField(source='id')

    class Meta:
        model = LedgerEntry
        fields = ['entry_id', 'event_type', 'timestamp', 'previous_hash', 'current_hash', 'payload']
