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
            name="StandardListEntry",
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
                (
                    "list_type",
                    models.CharField(
                        choices=[
                            ("watchlist", "Watchlist"),
                            ("watched", "Watched"),
                            ("favourites", "Favourites"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "user_rating",
                    models.PositiveSmallIntegerField(blank=True, null=True),
                ),
                (
                    "date_added",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "film",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="list_entries",
                        to="films.film",
                    ),
                ),
            ],
            options={
                "ordering": ["user_id", "list_type", "-date_added"],
                "indexes": [
                    models.Index(
                        fields=["user_id", "list_type"],
                        name="standard_entry_user_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_id", "film", "list_type"),
                        name="unique_standard_list_entry",
                    )
                ],
            },
        ),
    ]
