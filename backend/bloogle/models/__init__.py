# bloogle/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: Account, credentials and email verification state
- Session: Server-side login session bound to a User
- Image: Uploaded image blob (profile pictures, post images)
- Post: Blog post written by a User
- SavedPost: Bookmark association between a User and a Post
"""
from .user import User
from .session import Session
from .image import Image
from .post import Post, SavedPost
