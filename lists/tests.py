# lists/tests.py

from unittest import mock

from django.db import DatabaseError, IntegrityError
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from customlists.models import CustomList, CustomListItem
from films.models import Film
from films.services.posters import ArchivedPoster
from movielog.exceptions import UpstreamError
from watchlist.models import StandardListEntry
from .services import get_lists

ADMIN_CREDENTIAL = "let-me-in"


@override_settings(ADMIN_CREDENTIAL=ADMIN_CREDENTIAL, LISTS_CONCURRENT_READS=False)
class ListsAPITestCase(APITestCase):
    def setUp(self):
        self.url = reverse("lists")
        self.godfather = Film.objects.create(
            imdb_id="tt0068646",
            title="The Godfather",
            year="1972",
            runtime="175 min",
            director="Francis Ford Coppola",
            genre="Crime, Drama",
            poster_url="https://blob.example.com/posters/tt0068646.jpg",
        )
        self.shawshank = Film.objects.create(
            imdb_id="tt0111161",
            title="The Shawshank Redemption",
            year="1994",
            runtime="142 min",
            director="Frank Darabont",
            genre="Drama",
        )

    def authorize(self):
        self.client.credentials(HTTP_X_ADMIN_CREDENTIAL=ADMIN_CREDENTIAL)

    def post_action(self, **payload):
        return self.client.post(self.url, payload, format="json")

    def toggle(self, imdb_id, list_type, user_id="u1"):
        return self.post_action(
            action="TOGGLE_STANDARD_LIST",
            userId=user_id,
            listType=list_type,
            movie={"imdb_id": imdb_id},
        )

    def fetch(self, user_id="u1"):
        response = self.client.get(self.url, {"userId": user_id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return response.data

    def standard_lists_of(self, imdb_id, user_id="u1"):
        return sorted(
            row["list_type"]
            for row in self.fetch(user_id)["standardLists"]
            if row["imdb_id"] == imdb_id
        )


class ReadPathTests(ListsAPITestCase):
    def test_missing_user_id_is_rejected(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Invalid request.")
        self.assertIn("userId", response.data["details"])

    def test_reads_need_no_credential(self):
        response = self.client.get(self.url, {"userId": "u1"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"standardLists": [], "customLists": []})

    def test_standard_rows_carry_catalog_columns(self):
        StandardListEntry.objects.create(
            user_id="u1", film=self.godfather, list_type="favourites", user_rating=9
        )

        rows = self.fetch()["standardLists"]

        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row["imdb_id"], "tt0068646")
        self.assertEqual(row["title"], "The Godfather")
        self.assertEqual(row["director"], "Francis Ford Coppola")
        self.assertEqual(
            row["poster_url"], "https://blob.example.com/posters/tt0068646.jpg"
        )
        self.assertEqual(row["list_type"], "favourites")
        self.assertEqual(row["user_rating"], 9)
        self.assertIsNotNone(row["date_added"])

    def test_only_the_requested_users_rows_are_returned(self):
        StandardListEntry.objects.create(
            user_id="u1", film=self.godfather, list_type="watchlist"
        )
        StandardListEntry.objects.create(
            user_id="u2", film=self.shawshank, list_type="watchlist"
        )
        CustomList.objects.create(user_id="u2", name="Not yours")

        data = self.fetch("u1")

        self.assertEqual([row["imdb_id"] for row in data["standardLists"]], ["tt0068646"])
        self.assertEqual(data["customLists"], [])

    def test_empty_custom_list_is_still_listed(self):
        custom_list = CustomList.objects.create(user_id="u1", name="Someday")

        rows = self.fetch()["customLists"]

        self.assertEqual(len(rows), 1)
        self.assertEqual(str(rows[0]["list_id"]), str(custom_list.id))
        self.assertEqual(rows[0]["list_name"], "Someday")
        self.assertIsNone(rows[0]["imdb_id"])
        self.assertIsNone(rows[0]["title"])
        self.assertIsNone(rows[0]["date_added"])

    def test_custom_list_has_one_row_per_film(self):
        custom_list = CustomList.objects.create(user_id="u1", name="Classics")
        CustomListItem.objects.create(custom_list=custom_list, film=self.godfather)
        CustomListItem.objects.create(custom_list=custom_list, film=self.shawshank)

        rows = self.fetch()["customLists"]

        self.assertEqual(
            sorted(row["imdb_id"] for row in rows), ["tt0068646", "tt0111161"]
        )
        self.assertTrue(all(row["list_name"] == "Classics" for row in rows))

    @mock.patch("lists.views.get_lists")
    def test_store_failure_is_reported_as_500(self, mock_get_lists):
        mock_get_lists.side_effect = DatabaseError("database is locked")

        response = self.client.get(self.url, {"userId": "u1"})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "database is locked")


class CredentialTests(ListsAPITestCase):
    def test_missing_credential_is_unauthorized(self):
        response = self.toggle("tt0068646", "watchlist")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(
            response.data["error"], "Unauthorized: invalid admin credential."
        )
        self.assertEqual(StandardListEntry.objects.count(), 0)

    def test_wrong_credential_is_unauthorized(self):
        self.client.credentials(HTTP_X_ADMIN_CREDENTIAL="guess")

        response = self.post_action(action="CREATE_LIST", userId="u1", name="Nope")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(CustomList.objects.exists())

    @override_settings(ADMIN_CREDENTIAL="")
    def test_unset_server_credential_rejects_every_write(self):
        self.client.credentials(HTTP_X_ADMIN_CREDENTIAL="")

        response = self.post_action(action="CREATE_LIST", userId="u1", name="Nope")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class RequestDecodingTests(ListsAPITestCase):
    def setUp(self):
        super().setUp()
        self.authorize()

    def test_unknown_action_is_rejected(self):
        response = self.post_action(action="DROP_TABLES", userId="u1")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("action", response.data["details"])

    def test_missing_action_is_rejected(self):
        response = self.post_action(userId="u1")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_requires_list_type_and_movie(self):
        response = self.post_action(action="TOGGLE_STANDARD_LIST", userId="u1")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("listType", response.data["details"])
        self.assertIn("movie", response.data["details"])

    def test_unknown_list_type_is_rejected(self):
        response = self.toggle("tt0068646", "maybe-later")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_malformed_imdb_id_is_rejected(self):
        response = self.toggle("0068646", "watchlist")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_user_id_is_rejected(self):
        response = self.post_action(action="CREATE_LIST", name="Oscars")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("userId", response.data["details"])

    def test_malformed_list_id_is_rejected(self):
        response = self.post_action(action="DELETE_LIST", userId="u1", listId="abc")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ToggleStandardListTests(ListsAPITestCase):
    def setUp(self):
        super().setUp()
        self.authorize()

    def test_toggling_twice_restores_original_state(self):
        first = self.toggle("tt0068646", "watchlist")

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data, {"success": True})
        self.assertEqual(self.standard_lists_of("tt0068646"), ["watchlist"])

        second = self.toggle("tt0068646", "watchlist")

        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(self.standard_lists_of("tt0068646"), [])
        self.assertEqual(self.fetch()["standardLists"], [])

    def test_marking_watched_removes_from_watchlist(self):
        self.toggle("tt0068646", "watchlist")
        self.toggle("tt0068646", "watched")

        entries = StandardListEntry.objects.filter(user_id="u1", film=self.godfather)
        self.assertEqual(list(entries.values_list("list_type", flat=True)), ["watched"])

    def test_watchlist_after_watched_keeps_both(self):
        self.toggle("tt0068646", "watched")
        self.toggle("tt0068646", "watchlist")

        self.assertEqual(self.standard_lists_of("tt0068646"), ["watched", "watchlist"])

    def test_favourites_is_independent_of_watched(self):
        self.toggle("tt0068646", "watchlist")
        self.toggle("tt0068646", "favourites")

        self.assertEqual(
            self.standard_lists_of("tt0068646"), ["favourites", "watchlist"]
        )

    def test_users_do_not_share_lists(self):
        self.toggle("tt0068646", "watchlist", user_id="u1")
        self.toggle("tt0068646", "watchlist", user_id="u2")
        self.toggle("tt0068646", "watchlist", user_id="u1")

        self.assertEqual(self.standard_lists_of("tt0068646", "u1"), [])
        self.assertEqual(self.standard_lists_of("tt0068646", "u2"), ["watchlist"])

    @mock.patch("films.services.catalog.archive_poster")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_unknown_film_is_materialized_first(self, mock_fetch, mock_archive):
        mock_fetch.return_value = {
            "Title": "Seven Samurai",
            "Year": "1954",
            "Runtime": "207 min",
            "Director": "Akira Kurosawa",
            "Actors": "Toshirô Mifune, Takashi Shimura",
            "Genre": "Action, Drama",
            "Poster": "https://m.media-amazon.com/images/M/samurai.jpg",
            "Response": "True",
        }
        mock_archive.return_value = ArchivedPoster(
            "https://blob.example.com/posters/tt0047478.jpg", True
        )

        response = self.toggle("tt0047478", "watchlist")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        film = Film.objects.get(imdb_id="tt0047478")
        self.assertEqual(film.director, "Akira Kurosawa")
        self.assertEqual(film.poster_url, "https://blob.example.com/posters/tt0047478.jpg")
        self.assertEqual(self.standard_lists_of("tt0047478"), ["watchlist"])

    def test_losing_insert_of_overlapping_adds_is_a_store_error(self):
        # the other request inserted the row after this one checked for it
        with mock.patch.object(
            StandardListEntry.objects,
            "create",
            side_effect=IntegrityError("UNIQUE constraint failed"),
        ):
            response = self.toggle("tt0068646", "watchlist")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "UNIQUE constraint failed")

    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_upstream_miss_fails_without_membership(self, mock_fetch):
        mock_fetch.side_effect = UpstreamError("Incorrect IMDb ID.")

        response = self.toggle("tt9999999", "watchlist")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "Incorrect IMDb ID.")
        self.assertFalse(Film.objects.filter(imdb_id="tt9999999").exists())
        self.assertEqual(StandardListEntry.objects.count(), 0)


class CustomListTests(ListsAPITestCase):
    def setUp(self):
        super().setUp()
        self.authorize()

    def create_list(self, name, user_id="u1"):
        response = self.post_action(action="CREATE_LIST", userId=user_id, name=name)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return response.data["id"]

    def test_create_add_and_read_back(self):
        list_id = self.create_list("Oscars")

        response = self.post_action(
            action="ADD_TO_CUSTOM_LIST",
            userId="u1",
            listId=list_id,
            movie={"imdb_id": "tt0111161"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"success": True})

        rows = self.fetch()["customLists"]
        self.assertEqual(len(rows), 1)
        self.assertEqual(str(rows[0]["list_id"]), list_id)
        self.assertEqual(rows[0]["list_name"], "Oscars")
        self.assertEqual(rows[0]["imdb_id"], "tt0111161")
        self.assertIsNotNone(rows[0]["date_added"])

    def test_create_list_returns_new_id(self):
        list_id = self.create_list("  Halloween Picks  ")

        custom_list = CustomList.objects.get(id=list_id)
        self.assertEqual(custom_list.user_id, "u1")
        self.assertEqual(custom_list.name, "Halloween Picks")

    def test_blank_name_is_rejected(self):
        response = self.post_action(action="CREATE_LIST", userId="u1", name="   ")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(CustomList.objects.exists())

    def test_adding_same_film_twice_keeps_one_row(self):
        list_id = self.create_list("Oscars")
        payload = {
            "action": "ADD_TO_CUSTOM_LIST",
            "userId": "u1",
            "listId": list_id,
            "movie": {"imdb_id": "tt0111161"},
        }

        first = self.client.post(self.url, payload, format="json")
        second = self.client.post(self.url, payload, format="json")

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(CustomListItem.objects.filter(custom_list_id=list_id).count(), 1)

    def test_delete_list_removes_its_memberships(self):
        list_id = self.create_list("Oscars")
        for imdb_id in ("tt0111161", "tt0068646"):
            self.post_action(
                action="ADD_TO_CUSTOM_LIST",
                userId="u1",
                listId=list_id,
                movie={"imdb_id": imdb_id},
            )
        self.assertEqual(CustomListItem.objects.count(), 2)

        response = self.post_action(action="DELETE_LIST", userId="u1", listId=list_id)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(CustomList.objects.filter(id=list_id).exists())
        self.assertFalse(CustomListItem.objects.filter(custom_list_id=list_id).exists())
        self.assertEqual(
            [row for row in self.fetch()["customLists"] if str(row["list_id"]) == list_id],
            [],
        )

    def test_cannot_delete_another_users_list(self):
        list_id = self.create_list("Mine", user_id="owner")

        response = self.post_action(action="DELETE_LIST", userId="intruder", listId=list_id)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(CustomList.objects.filter(id=list_id).exists())

    def test_cannot_add_to_another_users_list(self):
        list_id = self.create_list("Mine", user_id="owner")

        response = self.post_action(
            action="ADD_TO_CUSTOM_LIST",
            userId="intruder",
            listId=list_id,
            movie={"imdb_id": "tt0111161"},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(CustomListItem.objects.exists())

    @mock.patch("films.services.catalog.archive_poster")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_adding_unknown_film_materializes_it_first(self, mock_fetch, mock_archive):
        mock_fetch.return_value = {
            "Title": "Rashomon",
            "Year": "1950",
            "Runtime": "88 min",
            "Director": "Akira Kurosawa",
            "Genre": "Crime, Drama, Mystery",
            "Poster": "https://m.media-amazon.com/images/M/rashomon.jpg",
            "Response": "True",
        }
        mock_archive.return_value = ArchivedPoster(
            "https://blob.example.com/posters/tt0042876.jpg", True
        )
        list_id = self.create_list("Kurosawa")

        response = self.post_action(
            action="ADD_TO_CUSTOM_LIST",
            userId="u1",
            listId=list_id,
            movie={"imdb_id": "tt0042876"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_fetch.assert_called_once_with("tt0042876")
        film = Film.objects.get(imdb_id="tt0042876")
        self.assertEqual(film.director, "Akira Kurosawa")
        self.assertTrue(
            CustomListItem.objects.filter(custom_list_id=list_id, film=film).exists()
        )
        rows = self.fetch()["customLists"]
        self.assertEqual([row["imdb_id"] for row in rows], ["tt0042876"])
        self.assertEqual(
            rows[0]["poster_url"], "https://blob.example.com/posters/tt0042876.jpg"
        )

    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_adding_film_unknown_upstream_fails_without_item(self, mock_fetch):
        mock_fetch.side_effect = UpstreamError("Incorrect IMDb ID.")
        list_id = self.create_list("Oscars")

        response = self.post_action(
            action="ADD_TO_CUSTOM_LIST",
            userId="u1",
            listId=list_id,
            movie={"imdb_id": "tt9999999"},
        )

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "Incorrect IMDb ID.")
        self.assertFalse(Film.objects.filter(imdb_id="tt9999999").exists())
        self.assertFalse(CustomListItem.objects.exists())

    def test_remove_from_custom_list(self):
        list_id = self.create_list("Oscars")
        self.post_action(
            action="ADD_TO_CUSTOM_LIST",
            userId="u1",
            listId=list_id,
            movie={"imdb_id": "tt0111161"},
        )

        response = self.post_action(
            action="REMOVE_FROM_CUSTOM_LIST",
            userId="u1",
            listId=list_id,
            movie={"imdb_id": "tt0111161"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(CustomListItem.objects.exists())
        rows = self.fetch()["customLists"]
        self.assertEqual(len(rows), 1)
        self.assertIsNone(rows[0]["imdb_id"])


class RateMovieTests(ListsAPITestCase):
    def setUp(self):
        super().setUp()
        self.authorize()

    def test_rating_applies_to_all_of_the_users_rows(self):
        self.toggle("tt0068646", "watched")
        self.toggle("tt0068646", "favourites")

        response = self.post_action(
            action="RATE_MOVIE", userId="u1", movie={"imdb_id": "tt0068646"}, rating=10
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ratings = {row["user_rating"] for row in self.fetch()["standardLists"]}
        self.assertEqual(ratings, {10})

    def test_rating_can_be_cleared(self):
        StandardListEntry.objects.create(
            user_id="u1", film=self.godfather, list_type="watched", user_rating=7
        )

        self.post_action(
            action="RATE_MOVIE", userId="u1", movie={"imdb_id": "tt0068646"}, rating=None
        )

        self.assertIsNone(StandardListEntry.objects.get().user_rating)

    def test_rating_out_of_range_is_rejected(self):
        self.toggle("tt0068646", "watched")

        response = self.post_action(
            action="RATE_MOVIE", userId="u1", movie={"imdb_id": "tt0068646"}, rating=11
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rating_film_outside_lists_is_rejected(self):
        response = self.post_action(
            action="RATE_MOVIE", userId="u1", movie={"imdb_id": "tt0111161"}, rating=8
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(LISTS_CONCURRENT_READS=True)
class ConcurrentReadTests(TestCase):
    @mock.patch("lists.services.custom_list_rows")
    @mock.patch("lists.services.standard_list_rows")
    def test_both_queries_are_joined(self, mock_standard, mock_custom):
        mock_standard.return_value = [{"imdb_id": "tt0068646", "list_type": "watched"}]
        mock_custom.return_value = [{"list_id": "l1", "list_name": "Oscars"}]

        data = get_lists("u1")

        self.assertEqual(data["standardLists"], mock_standard.return_value)
        self.assertEqual(data["customLists"], mock_custom.return_value)
        mock_standard.assert_called_once_with("u1")
        mock_custom.assert_called_once_with("u1")

    @mock.patch("lists.services.custom_list_rows")
    @mock.patch("lists.services.standard_list_rows")
    def test_failure_in_either_query_fails_the_read(self, mock_standard, mock_custom):
        mock_standard.return_value = []
        mock_custom.side_effect = DatabaseError("connection reset")

        with self.assertRaises(DatabaseError):
            get_lists("u1")
