# watchlist/tests.py

from django.db import IntegrityError, transaction
from django.test import TestCase

from films.models import Film
from .models import ListType, StandardListEntry


class StandardListEntryModelTests(TestCase):
    def setUp(self):
        self.film = Film.objects.create(
            imdb_id="tt0068646",
            title="The Godfather",
            year="1972",
        )

    def test_same_film_cannot_be_in_same_list_twice(self):
        StandardListEntry.objects.create(
            user_id="u1", film=self.film, list_type=ListType.WATCHLIST
        )

        with self.assertRaises(IntegrityError), transaction.atomic():
            StandardListEntry.objects.create(
                user_id="u1", film=self.film, list_type=ListType.WATCHLIST
            )
        self.assertEqual(StandardListEntry.objects.count(), 1)

    def test_same_film_may_sit_in_different_lists_and_users(self):
        StandardListEntry.objects.create(
            user_id="u1", film=self.film, list_type=ListType.WATCHED
        )
        StandardListEntry.objects.create(
            user_id="u1", film=self.film, list_type=ListType.FAVOURITES
        )
        StandardListEntry.objects.create(
            user_id="u2", film=self.film, list_type=ListType.WATCHED
        )

        self.assertEqual(StandardListEntry.objects.count(), 3)

    def test_new_entry_is_stamped_and_unrated(self):
        entry = StandardListEntry.objects.create(
            user_id="u1", film=self.film, list_type=ListType.FAVOURITES
        )

        self.assertIsNotNone(entry.date_added)
        self.assertIsNone(entry.user_rating)
        self.assertEqual(str(entry), "u1 – favourites – The Godfather (1972)")
