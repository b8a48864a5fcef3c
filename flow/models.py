"""
Database models for the patient flow backend.

A :class:`Visit` is one patient's journey through the hospital stations.
Each time the visit enters a station a :class:`QueueEntry` (token) is
created for that stage; entries are never reused across stages.  Triage
intake is stored once per visit in :class:`TriageRecord` and the daily
token counters live in :class:`DailySequence`.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q


class Stage(models.TextChoices):
    RECEPTION = 'reception', 'Reception'
    TRIAGE = 'triage', 'Triage'
    DOCTOR = 'doctor', 'Doctor'
    PHARMACY = 'pharmacy', 'Pharmacy'
    LAB = 'lab', 'Lab'
    BILLING = 'billing', 'Billing'


class Priority(models.TextChoices):
    STANDARD = 'standard', 'Standard'
    URGENT = 'urgent', 'Urgent'
    EMERGENCY = 'emergency', 'Emergency'


PRIORITY_RANK = {
    'standard': 0,
    'urgent': 1,
    'emergency': 2,
}


class User(AbstractUser):
    """Custom user model with a role.

    Patients and doctors are users too: the queue core only ever refers
    to them by primary key and resolves them through
    :mod:`flow.services.directory`.
    """
    ROLE_CHOICES = [
        ('patient', 'Patient'),
        ('reception', 'Reception'),
        ('triage', 'Triage nurse'),
        ('doctor', 'Doctor'),
        ('billing', 'Billing'),
        ('admin', 'Administrator'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='patient', db_index=True)
    specialization = models.CharField(max_length=120, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Visit(models.Model):
    """A single hospital encounter moving through the stations."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    visit_number = models.CharField(max_length=40, unique=True)
    patient = models.ForeignKey(User, on_delete=models.PROTECT, related_name='visits')
    current_stage = models.CharField(max_length=20, choices=Stage.choices, default=Stage.RECEPTION, db_index=True)
    assigned_doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='assigned_visits'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    stage_entered_at = models.DateTimeField()

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.visit_number} @ {self.current_stage}"


class QueueEntry(models.Model):
    """A token waiting at, called to, or finished with one station."""
    STATUS_WAITING = 'waiting'
    STATUS_CALLED = 'called'
    STATUS_SERVED = 'served'
    STATUS_SKIPPED = 'skipped'
    STATUS_CHOICES = [
        (STATUS_WAITING, 'Waiting'),
        (STATUS_CALLED, 'Called'),
        (STATUS_SERVED, 'Served'),
        (STATUS_SKIPPED, 'Skipped'),
    ]
    ACTIVE_STATUSES = (STATUS_WAITING, STATUS_CALLED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    visit = models.ForeignKey(Visit, on_delete=models.CASCADE, related_name='entries')
    stage = models.CharField(max_length=20, choices=Stage.choices)
    token_number = models.CharField(max_length=32)
    token_date = models.DateField()
    token_seq = models.PositiveIntegerField()
    priority = models.CharField(max_length=20, choices=Priority.choices, default=Priority.STANDARD)
    priority_rank = models.PositiveSmallIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_WAITING)
    doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_entries'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    called_at = models.DateTimeField(null=True, blank=True)
    served_at = models.DateTimeField(null=True, blank=True)
    skipped_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['stage', 'token_date', 'token_seq'], name='uniq_token_per_stage_day'
            ),
            models.UniqueConstraint(
                fields=['visit', 'stage'],
                condition=Q(status__in=['waiting', 'called']),
                name='uniq_active_entry_per_visit_stage',
            ),
        ]
        indexes = [
            models.Index(fields=['stage', 'status', '-priority_rank', 'created_at'], name='flow_queue_order_idx'),
            models.Index(fields=['stage', 'doctor', 'status'], name='flow_queue_doctor_idx'),
        ]

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    def __str__(self) -> str:
        return f"{self.token_number} ({self.status})"


class TriageRecord(models.Model):
    """Clinical intake written at triage, read at the doctor station.

    Saving a record replaces every field; there is no merge.
    """
    visit = models.OneToOneField(Visit, on_delete=models.CASCADE, primary_key=True, related_name='triage')
    temperature = models.FloatField(null=True, blank=True)
    systolic = models.FloatField(null=True, blank=True)
    diastolic = models.FloatField(null=True, blank=True)
    heart_rate = models.FloatField(null=True, blank=True)
    spo2 = models.FloatField(null=True, blank=True)
    weight = models.FloatField(null=True, blank=True)
    height = models.FloatField(null=True, blank=True)
    symptoms = models.TextField(null=True, blank=True)
    allergies = models.TextField(null=True, blank=True)
    current_meds = models.TextField(null=True, blank=True)
    pain_scale = models.PositiveSmallIntegerField(null=True, blank=True)
    priority = models.CharField(max_length=20, choices=Priority.choices, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    recorded_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='triage_records'
    )
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Triage for {self.visit_id}"


class DailySequence(models.Model):
    """Last value issued for one sequencer scope on one calendar day."""
    scope = models.CharField(max_length=20)
    day = models.DateField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['scope', 'day'], name='uniq_sequence_scope_day'),
        ]

    def __str__(self) -> str:
        return f"{self.scope}@{self.day}: {self.last_value}"
