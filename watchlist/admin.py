from django.contrib import admin
from .models import StandardListEntry


@admin.register(StandardListEntry)
class StandardListEntryAdmin(admin.ModelAdmin):
    list_display = ("user_id", "list_type", "film", "user_rating", "date_added")
    search_fields = ("user_id", "film__title", "film__imdb_id")
    list_filter = ("list_type",)
