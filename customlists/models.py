import uuid
from django.db import models
from django.utils import timezone
from films.models import Film


class CustomList(models.Model):
    """A named list created by, and visible only to, one user."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=64)
    name = models.CharField(max_length=100)
    date_created = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["user_id"], name="custom_list_user_idx"),
        ]
        ordering = ["user_id", "-date_created"]

    def __str__(self):
        return f"{self.user_id} – {self.name}"


class CustomListItem(models.Model):
    # Deleting a list deletes its items
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    custom_list = models.ForeignKey(
        CustomList,
        on_delete=models.CASCADE,
        related_name="items",
    )
    film = models.ForeignKey(
        Film,
        on_delete=models.CASCADE,
        related_name="in_custom_lists",
    )
    date_added = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["custom_list", "film"],
                name="unique_film_per_custom_list",
            ),
        ]
        ordering = ["custom_list", "-date_added"]

    def __str__(self):
        return f"{self.custom_list.name} – {self.film}"
