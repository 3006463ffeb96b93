import uuid
from django.db import models


class Film(models.Model):
    """
    Canonical movie metadata, keyed by IMDb id.

    Rows are created on first reference from any list and never
    updated or deleted afterwards.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    imdb_id = models.CharField(max_length=20, unique=True)
    title = models.CharField(max_length=255)
    # OMDb years are strings ("1994", "2005–2010")
    year = models.CharField(max_length=20, blank=True)
    runtime = models.CharField(max_length=50, blank=True)
    director = models.CharField(max_length=255, blank=True)
    actors = models.TextField(blank=True)
    genre = models.CharField(max_length=255, blank=True)
    poster_url = models.URLField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["title"]

    def __str__(self):
        return f"{self.title} ({self.year})"
