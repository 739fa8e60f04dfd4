import hashlib
import json
from django.db import models, transaction
from django.utils import timezone

GENESIS_HASH = "0" * 64


# --- The Journal ---
# Every committed ledger event lands here, each row linked to the one before it.

class LedgerEntry(models.Model):
    """
    One committed ledger event, cryptographically linked to the entry
    before it. Rows are only ever appended.
    """
    event_type = models.CharField(max_length=64, db_index=True,
                                  help_text="Name of the ledger event, e.g. VoteCast.")

    # e.g. {"voter": "alice", "candidate_id": 2, "timestamp": 1767225600}
    payload = models.JSONField()

    timestamp = models.DateTimeField(db_index=True, editable=False)

    # The "chain" links
    previous_hash = models.CharField(max_length=64, blank=True,
                                     help_text="Hash of the previous entry in the journal.")

    current_hash = models.CharField(max_length=64, unique=True, db_index=True,
                                    help_text="Hash of this entry's data.")

    class Meta:
        ordering = ['id']
        verbose_name_plural = "ledger entries"

    def __str__(self):
        return f"{self.event_type} #{self.id} at {self.timestamp}"

    def calculate_hash(self):
        """Hash of this entry's content plus the hash it links to."""
        payload_str = json.dumps(self.payload, sort_keys=True)

        # Timestamp goes in as ISO 8601 so the hash is reproducible.
        data_to_hash = (
                self.event_type +
                payload_str +
                self.timestamp.isoformat() +
                self.previous_hash
        )

        return hashlib.sha256(data_to_hash.encode('utf-8')).hexdigest()

    def save(self, *args, **kwargs):
        with transaction.atomic():
            if self.pk is None:
                if not self.timestamp:
                    self.timestamp = timezone.now()

                last_entry = LedgerEntry.objects.select_for_update().order_by('-id').first()
                self.previous_hash = last_entry.current_hash if last_entry else GENESIS_HASH
                self.current_hash = self.calculate_hash()

            super().save(*args, **kwargs)


def verify_journal():
    """
    Walk the journal from the first entry.
    Returns the id of the first entry whose link or hash does not check out,
    or None when the whole chain is intact.
    """
    expected_previous = GENESIS_HASH
    for entry in LedgerEntry.objects.order_by('id').iterator():
        if entry.previous_hash != expected_previous:
            return entry.id
        if entry.calculate_hash() != entry.current_hash:
            return entry.id
        expected_previous = entry.current_hash
    return None
