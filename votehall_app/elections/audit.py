from elections.models import AuditLogEntry, Election


def record_event(*, election: Election, event_type: str, payload: dict[str, object], actor_id: int | None = None) -> AuditLogEntry:
    data = dict(payload)
    if actor_id is not None:
        data["actor_id"] = actor_id
    return AuditLogEntry.objects.create(election=election, event_type=event_type, payload=data)
