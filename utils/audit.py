import json

from flask import request, has_request_context

from models import db
from models.audit_log import AuditLog


def client_ip():
    if not has_request_context():
        return None
    forwarded = request.headers.get("X-Forwarded-For", "")
    # first hop is the client when behind a proxy
    return forwarded.split(",")[0].strip() or request.remote_addr


def log_event(action: str, entity=None, entity_id=None, reference=None, metadata=None):
    """Record an audit row; works from requests and CLI commands alike."""
    user_agent = request.headers.get("User-Agent", "") if has_request_context() else ""

    row = AuditLog(
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        reference_code=reference,
        ip=client_ip(),
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
    return row
