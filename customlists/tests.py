# customlists/tests.py

from django.db import IntegrityError, transaction
from django.test import TestCase

from films.models import Film
from .models import CustomList, CustomListItem


class CustomListModelTests(TestCase):
    def setUp(self):
        self.film = Film.objects.create(
            imdb_id="tt0111161",
            title="The Shawshank Redemption",
            year="1994",
        )
        self.other_film = Film.objects.create(
            imdb_id="tt0068646",
            title="The Godfather",
            year="1972",
        )
        self.custom_list = CustomList.objects.create(user_id="u1", name="Oscars")

    def test_deleting_list_deletes_its_items(self):
        CustomListItem.objects.create(custom_list=self.custom_list, film=self.film)
        CustomListItem.objects.create(custom_list=self.custom_list, film=self.other_film)
        list_id = self.custom_list.id

        self.custom_list.delete()

        self.assertFalse(CustomListItem.objects.filter(custom_list_id=list_id).exists())
        # catalog rows stay
        self.assertEqual(Film.objects.count(), 2)

    def test_film_appears_once_per_list(self):
        CustomListItem.objects.create(custom_list=self.custom_list, film=self.film)

        with self.assertRaises(IntegrityError), transaction.atomic():
            CustomListItem.objects.create(custom_list=self.custom_list, film=self.film)

    def test_same_film_in_two_lists(self):
        second = CustomList.objects.create(user_id="u1", name="Rainy days")
        CustomListItem.objects.create(custom_list=self.custom_list, film=self.film)
        CustomListItem.objects.create(custom_list=second, film=self.film)

        self.assertEqual(self.film.in_custom_lists.count(), 2)
