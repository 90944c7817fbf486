from django.contrib import admin

from elections.models import AuditLogEntry, Ballot, Candidacy, Election, Identity


@admin.register(Identity)
class IdentityAdmin(admin.ModelAdmin):
    list_display = ("name", "role", "user", "state", "district")
    list_filter = ("role",)
    search_fields = ("name", "user__username", "user__email")

    def get_readonly_fields(self, request, obj=None):
        # Role is fixed once the identity exists.
        return ("role", "created_at") if obj is not None else ("created_at",)


@admin.register(Election)
class ElectionAdmin(admin.ModelAdmin):
    list_display = ("title", "status", "start_datetime", "end_datetime")
    list_filter = ("status",)
    search_fields = ("title",)
    # Status changes go through the lifecycle service.
    readonly_fields = ("status", "candidacy_ids", "created_by", "created_at", "updated_at")


@admin.register(Candidacy)
class CandidacyAdmin(admin.ModelAdmin):
    list_display = ("identity", "election", "position", "vote_count")
    list_filter = ("election",)
    readonly_fields = ("vote_count", "created_at")


@admin.register(Ballot)
class BallotAdmin(admin.ModelAdmin):
    list_display = ("id", "election", "created_at")
    list_filter = ("election",)

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = ("election", "event_type", "timestamp")
    list_filter = ("event_type",)
    readonly_fields = ("election", "event_type", "payload", "timestamp")
