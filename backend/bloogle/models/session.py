# bloogle/models/session.py
"""
Database model for login sessions.
A session binds the opaque cookie handle of one browser to a user until it
expires or is destroyed on logout.
"""
from tortoise import fields, models


class Session(models.Model):
    """
    Server-side session record.

    - key_hash: sha256(cookie handle) 64-character hexadecimal string (plain handle not stored)
    - user: bound account (cascade delete with the user)
    - created_at: login time
    - expires_at: absolute expiry; resolving an expired session deletes it
    """
    key_hash = fields.CharField(max_length=64, pk=True)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="sessions",
        on_delete=fields.CASCADE,
    )
    created_at = fields.DatetimeField()
    expires_at = fields.DatetimeField(index=True)

    class Meta:
        table = "sessions"
