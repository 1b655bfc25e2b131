from tappark_api.db.db import db
from datetime import datetime, timezone
import uuid

UUIDType = db.Uuid


def generate_uuid():
    return uuid.uuid4()


def utcnow():
    # Naive UTC, matching the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None
