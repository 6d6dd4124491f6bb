from tortoise import fields
from tortoise.models import Model

MAX_ID_LENGTH = 64


class BaseModel(Model):
    id = fields.CharField(pk=True, max_length=MAX_ID_LENGTH)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True
