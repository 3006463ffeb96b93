import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("films", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CustomList",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("user_id", models.CharField(max_length=64)),
                ("name", models.CharField(max_length=100)),
                (
                    "date_created",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
            ],
            options={
                "ordering": ["user_id", "-date_created"],
                "indexes": [
                    models.Index(fields=["user_id"], name="custom_list_user_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomListItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "date_added",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "custom_list",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="customlists.customlist",
                    ),
                ),
                (
                    "film",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="in_custom_lists",
                        to="films.film",
                    ),
                ),
            ],
            options={
                "ordering": ["custom_list", "-date_added"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("custom_list", "film"),
                        name="unique_film_per_custom_list",
                    )
                ],
            },
        ),
    ]
