from django.contrib import admin
from .models import Film


@admin.register(Film)
class FilmAdmin(admin.ModelAdmin):
    list_display = ("title", "year", "imdb_id", "director", "created_at")
    search_fields = ("title", "imdb_id", "director")
    list_filter = ("genre",)
    readonly_fields = ("created_at",)
