from django.contrib import admin
from .models import CustomList, CustomListItem


class CustomListItemInline(admin.TabularInline):
    model = CustomListItem
    extra = 0
    raw_id_fields = ("film",)


@admin.register(CustomList)
class CustomListAdmin(admin.ModelAdmin):
    list_display = ("name", "user_id", "date_created")
    search_fields = ("name", "user_id")
    inlines = [CustomListItemInline]
