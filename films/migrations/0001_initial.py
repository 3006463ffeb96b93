import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Film",
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
                ("imdb_id", models.CharField(max_length=20, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("year", models.CharField(blank=True, max_length=20)),
                ("runtime", models.CharField(blank=True, max_length=50)),
                ("director", models.CharField(blank=True, max_length=255)),
                ("actors", models.TextField(blank=True)),
                ("genre", models.CharField(blank=True, max_length=255)),
                ("poster_url", models.URLField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["title"],
            },
        ),
    ]
