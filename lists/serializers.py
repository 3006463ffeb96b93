from django.db import models
from rest_framework import serializers

from watchlist.models import ListType


class Action(models.TextChoices):
    TOGGLE_STANDARD_LIST = "TOGGLE_STANDARD_LIST"
    CREATE_LIST = "CREATE_LIST"
    DELETE_LIST = "DELETE_LIST"
    ADD_TO_CUSTOM_LIST = "ADD_TO_CUSTOM_LIST"
    REMOVE_FROM_CUSTOM_LIST = "REMOVE_FROM_CUSTOM_LIST"
    RATE_MOVIE = "RATE_MOVIE"


class MovieRefSerializer(serializers.Serializer):
    """
    A movie as the client knows it. Only imdb_id is required; the rest
    are hints used when the metadata provider leaves a value empty.
    """
    imdb_id = serializers.RegexField(r"^tt\d+$", max_length=20)
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    year = serializers.CharField(max_length=20, required=False, allow_blank=True)
    poster_url = serializers.CharField(
        max_length=500, required=False, allow_blank=True
    )


class ActionSerializer(serializers.Serializer):
    """Validates only the action tag; fields are checked per action."""
    action = serializers.ChoiceField(choices=Action.choices)


class UserRequestSerializer(serializers.Serializer):
    userId = serializers.CharField(max_length=64, source="user_id")


class ToggleStandardListSerializer(UserRequestSerializer):
    listType = serializers.ChoiceField(choices=ListType.choices, source="list_type")
    movie = MovieRefSerializer()


class CreateListSerializer(UserRequestSerializer):
    name = serializers.CharField(max_length=100)


class DeleteListSerializer(UserRequestSerializer):
    listId = serializers.UUIDField(source="list_id")


class CustomListMovieSerializer(UserRequestSerializer):
    listId = serializers.UUIDField(source="list_id")
    movie = MovieRefSerializer()


class RateMovieSerializer(UserRequestSerializer):
    movie = MovieRefSerializer()
    rating = serializers.IntegerField(min_value=1, max_value=10, allow_null=True)


ACTION_SERIALIZERS = {
    Action.TOGGLE_STANDARD_LIST: ToggleStandardListSerializer,
    Action.CREATE_LIST: CreateListSerializer,
    Action.DELETE_LIST: DeleteListSerializer,
    Action.ADD_TO_CUSTOM_LIST: CustomListMovieSerializer,
    Action.REMOVE_FROM_CUSTOM_LIST: CustomListMovieSerializer,
    Action.RATE_MOVIE: RateMovieSerializer,
}


def decode_mutation(data):
    """
    Turn a POST body into (action, validated fields).

    Raises ValidationError for an unknown action or missing fields.
    """
    tag = ActionSerializer(data=data)
    tag.is_valid(raise_exception=True)
    action = Action(tag.validated_data["action"])

    serializer = ACTION_SERIALIZERS[action](data=data)
    serializer.is_valid(raise_exception=True)
    return action, serializer.validated_data
