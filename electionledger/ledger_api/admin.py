from django.contrib import admin
from .models import LedgerEntry


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    """
    The journal is READ-ONLY. No one edits the chain.
    """
    list_display = ('id', 'event_type', 'timestamp', 'previous_hash', 'current_hash')
    list_filter = ('event_type',)
    search_fields = ('current_hash',)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
