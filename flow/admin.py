"""
Django admin registrations for the patient flow models.

Queue entries are shown read-only: status changes must go through the
queue store so that the compare-and-swap rules are never bypassed.
"""
from django.contrib import admin

from .models import DailySequence, QueueEntry, TriageRecord, User, Visit


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'specialization', 'is_active', 'is_staff')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'first_name', 'last_name')


class QueueEntryInline(admin.TabularInline):
    model = QueueEntry
    extra = 0
    can_delete = False
    fields = ('token_number', 'stage', 'priority', 'status', 'doctor', 'created_at', 'called_at', 'served_at', 'skipped_at')
    readonly_fields = fields


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ('visit_number', 'patient', 'current_stage', 'assigned_doctor', 'created_at')
    list_filter = ('current_stage',)
    search_fields = ('visit_number', 'patient__username')
    readonly_fields = ('visit_number', 'current_stage', 'stage_entered_at', 'created_at')
    inlines = [QueueEntryInline]


@admin.register(QueueEntry)
class QueueEntryAdmin(admin.ModelAdmin):
    list_display = ('token_number', 'stage', 'priority', 'status', 'doctor', 'created_at')
    list_filter = ('stage', 'status', 'priority')
    search_fields = ('token_number', 'visit__visit_number')

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(TriageRecord)
class TriageRecordAdmin(admin.ModelAdmin):
    list_display = ('visit', 'priority', 'pain_scale', 'updated_at')
    list_filter = ('priority',)


@admin.register(DailySequence)
class DailySequenceAdmin(admin.ModelAdmin):
    list_display = ('scope', 'day', 'last_value')
    list_filter = ('scope',)
