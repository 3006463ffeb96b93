import uuid
from django.db import models
from django.utils import timezone
from films.models import Film


class ListType(models.TextChoices):
    WATCHLIST = "watchlist", "Watchlist"
    WATCHED = "watched", "Watched"
    FAVOURITES = "favourites", "Favourites"


class StandardListEntry(models.Model):
    """
    One row = one film in one of a user's three standard lists.

    Presence of the row is membership; users are opaque client ids.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=64)
    film = models.ForeignKey(
        Film,
        on_delete=models.CASCADE,
        related_name="list_entries",
    )
    list_type = models.CharField(max_length=20, choices=ListType.choices)
    user_rating = models.PositiveSmallIntegerField(null=True, blank=True)
    date_added = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "film", "list_type"],
                name="unique_standard_list_entry",
            ),
        ]
        indexes = [
            models.Index(fields=["user_id", "list_type"], name="standard_entry_user_idx"),
        ]
        ordering = ["user_id", "list_type", "-date_added"]

    def __str__(self):
        return f"{self.user_id} – {self.list_type} – {self.film}"
