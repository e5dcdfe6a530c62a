"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- scheduler: Periodic background jobs (expired session sweep)
- security: Password hashing, opaque tokens and digests
"""
