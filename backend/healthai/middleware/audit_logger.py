"""
Audit logger – after-request hook that writes every JSON API interaction
to the audit_log table. Image payloads are replaced by their size.
"""

import json
import logging
from flask import request
from healthai.database import db
from healthai.models.models import AuditLog

logger = logging.getLogger("healthai.audit")

SKIP_PATHS = ("/api/health",)
REDACTED_FIELDS = ("base64Image",)
MAX_FIELD_LEN = 2000


def _redact(body: dict) -> dict:
    safe = dict(body)
    for key in REDACTED_FIELDS:
        if isinstance(safe.get(key), str):
            safe[key] = f"<{len(safe[key])} chars>"
    return safe


def audit_after_request(response):
    """Log every request/response pair for compliance auditing."""
    if request.path in SKIP_PATHS or request.method == "OPTIONS":
        return response

    try:
        req_body = None
        if request.is_json:
            try:
                body = request.get_json(silent=True)
                if isinstance(body, dict):
                    body = _redact(body)
                req_body = json.dumps(body)[:MAX_FIELD_LEN]
            except (TypeError, ValueError):
                req_body = "<unreadable>"

        resp_summary = None
        if response.is_json:
            resp_summary = json.dumps(response.get_json(silent=True))[:MAX_FIELD_LEN]
        elif response.status_code >= 400:
            resp_summary = response.get_data(as_text=True)[:MAX_FIELD_LEN]

        entry = AuditLog(
            endpoint=request.path,
            method=request.method,
            status_code=response.status_code,
            request_body=req_body,
            response_summary=resp_summary,
        )
        db.session.add(entry)
        db.session.commit()
    except Exception as exc:
        logger.warning("Audit logging failed: %s", exc)
        db.session.rollback()

    return response
