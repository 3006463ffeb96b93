from django.core.management.base import BaseCommand
from rest_framework.exceptions import APIException

from films.models import Film
from films.services.catalog import ensure_film


class Command(BaseCommand):
    help = "Materialize catalog rows for the given IMDb ids " \
            "(fetching metadata and archiving posters as needed)."

    def add_arguments(self, parser):
        parser.add_argument(
            "imdb_ids",
            nargs="+",
            help="IMDb ids such as tt0111161.",
        )

    def handle(self, *args, **options):
        imdb_ids = options["imdb_ids"]

        created_count = 0
        existing_count = 0
        failed_count = 0

        for imdb_id in imdb_ids:
            if Film.objects.filter(imdb_id=imdb_id).exists():
                existing_count += 1
                continue

            try:
                film = ensure_film(imdb_id)
            except APIException as exc:
                failed_count += 1
                self.stderr.write(f"{imdb_id}: {exc.detail}")
                continue

            created_count += 1
            self.stdout.write(f"Added {film} -> {film.poster_url or 'no poster'}")

        summary = (
            f"Done. Created {created_count}, already present {existing_count}, "
            f"failed {failed_count}."
        )
        if failed_count:
            self.stdout.write(self.style.WARNING(summary))
        else:
            self.stdout.write(self.style.SUCCESS(summary))
