"""
List Service: the read path and the mutations behind POST /lists.

Mutations run as sequential steps without a wrapping transaction.
A crash between removing a watchlist row and inserting the watched row
leaves the film in neither list; that is accepted. Two overlapping
adds of the same film to the same list can both pass the existence
check; the second insert then hits the unique constraint and fails
with a StoreError.
"""
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.db import connection
from django.db.models import F
from rest_framework.exceptions import ValidationError

from customlists.models import CustomList, CustomListItem
from films.services.catalog import ensure_film
from watchlist.models import ListType, StandardListEntry

from .serializers import Action

CATALOG_COLUMNS = (
    "imdb_id",
    "title",
    "year",
    "runtime",
    "director",
    "actors",
    "genre",
    "poster_url",
)


def standard_list_rows(user_id):
    """One row per (film, list type) the user has, newest first."""
    catalog = {column: F(f"film__{column}") for column in CATALOG_COLUMNS}
    qs = (
        StandardListEntry.objects.filter(user_id=user_id)
        .values("list_type", "user_rating", "date_added", **catalog)
        .order_by("-date_added")
    )
    return list(qs)


def custom_list_rows(user_id):
    """
    One row per (list, film) pair. Empty lists still appear once, with
    the film columns and date_added set to None.
    """
    catalog = {column: F(f"items__film__{column}") for column in CATALOG_COLUMNS}
    qs = (
        CustomList.objects.filter(user_id=user_id)
        .values(
            list_id=F("id"),
            list_name=F("name"),
            date_added=F("items__date_added"),
            **catalog,
        )
        .order_by("-date_created", F("date_added").desc(nulls_last=True))
    )
    return list(qs)


def _run_in_thread(func, *args):
    # pool threads open their own connection; release it when done
    try:
        return func(*args)
    finally:
        connection.close()


def get_lists(user_id):
    """
    Return {"standardLists": [...], "customLists": [...]} for a user.

    Both queries run concurrently unless LISTS_CONCURRENT_READS is off;
    a failure in either fails the whole read.
    """
    if not user_id:
        raise ValidationError({"userId": ["User ID is required."]})

    if not settings.LISTS_CONCURRENT_READS:
        return {
            "standardLists": standard_list_rows(user_id),
            "customLists": custom_list_rows(user_id),
        }

    with ThreadPoolExecutor(max_workers=2) as executor:
        standard = executor.submit(_run_in_thread, standard_list_rows, user_id)
        custom = executor.submit(_run_in_thread, custom_list_rows, user_id)
        return {
            "standardLists": standard.result(),
            "customLists": custom.result(),
        }


def _owned_list(user_id, list_id):
    custom_list = CustomList.objects.filter(id=list_id, user_id=user_id).first()
    if custom_list is None:
        raise ValidationError({"listId": ["Unknown list."]})
    return custom_list


def toggle_standard_list(user_id, movie, list_type):
    """
    Add the film to the list, or remove it if already there.

    Adding to watched removes the film from the watchlist first.
    """
    film = ensure_film(movie["imdb_id"], movie)
    entries = StandardListEntry.objects.filter(user_id=user_id, film=film)

    existing = entries.filter(list_type=list_type)
    if existing.exists():
        existing.delete()
        return {}

    if list_type == ListType.WATCHED:
        entries.filter(list_type=ListType.WATCHLIST).delete()

    StandardListEntry.objects.create(user_id=user_id, film=film, list_type=list_type)
    return {}


def create_list(user_id, name):
    custom_list = CustomList.objects.create(user_id=user_id, name=name)
    return {"id": str(custom_list.id)}


def delete_list(user_id, list_id):
    # items go with the list (on_delete=CASCADE)
    _owned_list(user_id, list_id).delete()
    return {}


def add_to_custom_list(user_id, list_id, movie):
    custom_list = _owned_list(user_id, list_id)
    film = ensure_film(movie["imdb_id"], movie)
    CustomListItem.objects.get_or_create(custom_list=custom_list, film=film)
    return {}


def remove_from_custom_list(user_id, list_id, movie):
    custom_list = _owned_list(user_id, list_id)
    CustomListItem.objects.filter(
        custom_list=custom_list, film__imdb_id=movie["imdb_id"]
    ).delete()
    return {}


def rate_movie(user_id, movie, rating):
    updated = StandardListEntry.objects.filter(
        user_id=user_id, film__imdb_id=movie["imdb_id"]
    ).update(user_rating=rating)
    if not updated:
        raise ValidationError({"movie": ["Movie is not in any of your lists."]})
    return {}


MUTATIONS = {
    Action.TOGGLE_STANDARD_LIST: toggle_standard_list,
    Action.CREATE_LIST: create_list,
    Action.DELETE_LIST: delete_list,
    Action.ADD_TO_CUSTOM_LIST: add_to_custom_list,
    Action.REMOVE_FROM_CUSTOM_LIST: remove_from_custom_list,
    Action.RATE_MOVIE: rate_movie,
}


def mutate(action, fields):
    """Apply one decoded mutation; returns extra response fields."""
    return MUTATIONS[action](**fields)
