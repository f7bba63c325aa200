from tortoise import fields, models

from mcprofile.profile.structures import Model


class CachedProfileSchema(models.Model):
    profile_id = fields.CharField(max_length=32, primary_key=True, unique=True)
    name = fields.CharField(max_length=255, null=False)
    folded_name = fields.CharField(max_length=255, null=True, db_index=True)
    has_name_history = fields.BooleanField(default=False)
    has_properties = fields.BooleanField(default=False)
    skin_url = fields.CharField(max_length=1024, default="")
    cape_url = fields.CharField(max_length=1024, default="")
    model = fields.IntEnumField(Model, null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "cached_profile"


class CachedPastNameSchema(models.Model):
    id = fields.IntField(primary_key=True, unique=True)
    profile = fields.ForeignKeyField("models.CachedProfileSchema", related_name="past_names",
                                     on_delete=fields.CASCADE, null=False)
    position = fields.IntField(null=False)
    name = fields.CharField(max_length=255, null=False)
    until_us = fields.BigIntField(null=True)  # microseconds since epoch

    class Meta:
        table = "cached_past_name"
        unique_together = (("profile", "position"),)


class NameAtTimeSchema(models.Model):
    id = fields.IntField(primary_key=True, unique=True)
    folded_name = fields.CharField(max_length=255, null=False)
    at_us = fields.BigIntField(null=False)  # microseconds since epoch
    profile_id = fields.CharField(max_length=32, null=False)

    class Meta:
        table = "name_at_time"
        unique_together = (("folded_name", "at_us"),)
