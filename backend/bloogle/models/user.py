# bloogle/models/user.py
"""
Database model for users.
Represents a registered account: login credentials, email verification state
and the optional profile image.
"""
from tortoise import fields, models


class User(models.Model):
    """
    User database model (the credential store).

    Relationships:
    - Has many Posts (one-to-many, via related_name="posts")
    - Has many Sessions (one-to-many, via related_name="sessions")
    - Has many SavedPosts (one-to-many, via related_name="saved_posts")
    - Belongs to an optional profile Image

    Security:
    - Password is stored as an Argon2 hash (never store plain text passwords)
    - Username and email are each unique across all users
    - verification_token / verification_expires are set together while the account
      is unverified and cleared together when it is verified
    """
    id = fields.IntField(pk=True)  # Surrogate primary key
    username = fields.CharField(
        max_length=64,
        unique=True,
        index=True
    )  # User login name (must be unique, indexed for fast lookups)
    email = fields.CharField(max_length=256, unique=True, index=True)  # Verification address (must be unique)
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    is_verified = fields.BooleanField(default=False)  # Flipped to True exactly once by the verification link
    verification_token = fields.CharField(max_length=128, null=True, unique=True)  # Opaque single-use token
    verification_expires = fields.DatetimeField(null=True)  # Absolute expiry of verification_token (UTC)
    image = fields.ForeignKeyField(
        "models.Image",
        related_name="profile_users",
        null=True,
        on_delete=fields.SET_NULL,
    )  # Optional profile image
    created_at = fields.DatetimeField(auto_now_add=True)  # Timestamp when account was created (auto-set on creation)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name

    def __str__(self) -> str:
        return self.username
