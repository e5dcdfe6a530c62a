# bloogle/models/image.py
from tortoise import fields, models


class Image(models.Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    mimetype = fields.CharField(max_length=128)
    data = fields.BinaryField()
    # sha256 of data; identical uploads share one row
    data_hash = fields.CharField(max_length=64, unique=True, index=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "images"
