from __future__ import annotations

from typing import override

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from elections.exceptions import ElectionValidationError


class Identity(models.Model):
    """The election-facing view of an authenticated account.

    Role is fixed at registration; the auth backend owns credentials.
    """

    class Role(models.TextChoices):
        admin = "admin", "Admin"
        voter = "voter", "Voter"
        candidate = "candidate", "Candidate"

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="identity")
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=16, choices=Role.choices)
    district = models.CharField(max_length=255, blank=True, default="")
    state = models.CharField(max_length=255, blank=True, default="")
    phone_number = models.CharField(max_length=32, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Identities"
        ordering = ("name", "id")

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"

    @override
    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_role = instance.__dict__.get("role")
        return instance

    @override
    def save(self, *args, **kwargs) -> None:
        loaded_role = getattr(self, "_loaded_role", None)
        if self.pk and loaded_role is not None and loaded_role != self.role:
            raise ElectionValidationError("Identity role cannot be changed after registration.")
        super().save(*args, **kwargs)
        self._loaded_role = self.role


class ElectionQuerySet(models.QuerySet["Election"]):
    def with_status(self, status: str) -> ElectionQuerySet:
        return self.filter(status=status)

    def overdue(self, *, now) -> ElectionQuerySet:
        """Active elections whose nominal end has passed; status is operator-driven."""
        return self.filter(status=Election.Status.active, end_datetime__lt=now)


class Election(models.Model):
    class Status(models.TextChoices):
        upcoming = "upcoming", "Upcoming"
        active = "active", "Active"
        completed = "completed", "Completed"

    title = models.CharField(max_length=255)
    description = models.TextField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.upcoming)
    start_datetime = models.DateTimeField()
    end_datetime = models.DateTimeField()
    created_by = models.ForeignKey(
        Identity,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_elections",
    )

    # Denormalized list of Candidacy PKs in application order. Candidacy rows
    # remain the source of truth.
    candidacy_ids = models.JSONField(blank=True, default=list)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ElectionQuerySet.as_manager()

    class Meta:
        ordering = ("-start_datetime", "id")
        constraints = [
            models.CheckConstraint(
                condition=Q(start_datetime__lt=F("end_datetime")),
                name="elections_election_start_before_end",
            ),
        ]

    def __str__(self) -> str:
        return self.title


class Candidacy(models.Model):
    election = models.ForeignKey(Election, on_delete=models.PROTECT, related_name="candidacies")
    identity = models.ForeignKey(Identity, on_delete=models.PROTECT, related_name="candidacies")
    position = models.CharField(max_length=255)

    # Only ever changed through an F() increment in elections.ballots.
    vote_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Candidacies"
        ordering = ("created_at", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["election", "identity"],
                name="uniq_candidacy_election_identity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.identity_id} ({self.election_id})"


class Ballot(models.Model):
    election = models.ForeignKey(Election, on_delete=models.PROTECT, related_name="ballots")
    candidacy = models.ForeignKey(Candidacy, on_delete=models.PROTECT, related_name="ballots")
    voter = models.ForeignKey(Identity, on_delete=models.PROTECT, related_name="ballots")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["election", "voter"],
                name="uniq_ballot_election_voter",
            ),
        ]
        indexes = [
            models.Index(fields=["election", "candidacy"], name="ballot_el_cand"),
        ]

    def __str__(self) -> str:
        return f"ballot:{self.election_id}:{self.pk}"


class AuditLogEntry(models.Model):
    election = models.ForeignKey(Election, on_delete=models.CASCADE, related_name="audit_log")
    timestamp = models.DateTimeField(auto_now_add=True)
    event_type = models.CharField(max_length=64)
    payload = models.JSONField(blank=True, default=dict)

    class Meta:
        verbose_name_plural = "Audit log entries"
        ordering = ("timestamp", "id")
        indexes = [
            models.Index(fields=["election", "timestamp"], name="audit_el_ts"),
        ]

    def __str__(self) -> str:
        return f"{self.election_id}:{self.event_type}"
