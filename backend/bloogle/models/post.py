# bloogle/models/post.py
"""
Database models for blog posts and saved-post bookmarks.
"""
from tortoise import fields, models


class Post(models.Model):
    """
    Blog post database model.

    Relationships:
    - Belongs to a User (author; many-to-one)
    - Optionally references an Image
    - Has many SavedPosts (users who bookmarked it)
    """
    id = fields.IntField(pk=True)
    author = fields.ForeignKeyField(
        "models.User",
        related_name="posts",
        on_delete=fields.CASCADE
    )  # Only the author may edit or delete the post
    title = fields.CharField(max_length=200)
    description = fields.TextField()
    image = fields.ForeignKeyField(
        "models.Image",
        related_name="posts",
        null=True,
        on_delete=fields.SET_NULL,
    )
    post_time = fields.DatetimeField()  # Set on create, refreshed on every update

    class Meta:
        table = "posts"


class SavedPost(models.Model):
    """
    Bookmark association between a user and a post.

    The (user, post) pair is unique, so concurrent saves collapse into one row.
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="saved_posts", on_delete=fields.CASCADE)
    post = fields.ForeignKeyField("models.Post", related_name="saved_by", on_delete=fields.CASCADE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "saved_posts"
        unique_together = (("user", "post"),)
