# films/tests.py

from io import BytesIO, StringIO
from unittest import mock

import requests
from django.core.management import call_command
from django.test import TestCase, override_settings
from PIL import Image, UnidentifiedImageError

from movielog.exceptions import UpstreamError
from .blob import blob_put
from .models import Film
from .omdb import fetch_movie_details, clean
from .services.catalog import ensure_film
from .services.posters import (
    ArchivedPoster,
    POSTER_MAX_WIDTH,
    archive_poster,
    compress_poster,
    poster_key,
)

POSTER_URL = "https://m.media-amazon.com/images/M/shawshank.jpg"

OMDB_SHAWSHANK = {
    "Title": "The Shawshank Redemption",
    "Year": "1994",
    "Runtime": "142 min",
    "Genre": "Drama",
    "Director": "Frank Darabont",
    "Actors": "Tim Robbins, Morgan Freeman, Bob Gunton",
    "Poster": POSTER_URL,
    "imdbID": "tt0111161",
    "Response": "True",
}


def make_image_bytes(width, height, fmt="PNG", mode="RGBA"):
    image = Image.new(mode, (width, height), color=(200, 30, 30, 255)[: len(mode)])
    out = BytesIO()
    image.save(out, format=fmt)
    return out.getvalue()


def http_response(status_code=200, content=b"", json_data=None):
    response = mock.MagicMock()
    response.__enter__.return_value = response
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = content
    response.iter_content.side_effect = lambda chunk_size=1: (
        content[i:i + chunk_size] for i in range(0, len(content), chunk_size)
    )
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(str(status_code))
    else:
        response.raise_for_status.return_value = None
    return response


class OmdbClientTests(TestCase):
    @override_settings(OMDB_API_KEY="omdb-key")
    @mock.patch("films.omdb.requests.get")
    def test_fetch_movie_details_sends_id_and_key(self, mock_get):
        mock_get.return_value = http_response(json_data=OMDB_SHAWSHANK)

        data = fetch_movie_details("tt0111161")

        self.assertEqual(data["Title"], "The Shawshank Redemption")
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["params"], {"i": "tt0111161", "apikey": "omdb-key"})
        self.assertIn("timeout", kwargs)

    @mock.patch("films.omdb.requests.get")
    def test_no_match_raises_upstream_error(self, mock_get):
        mock_get.return_value = http_response(
            json_data={"Response": "False", "Error": "Incorrect IMDb ID."}
        )

        with self.assertRaises(UpstreamError) as ctx:
            fetch_movie_details("tt0000000")
        self.assertEqual(str(ctx.exception.detail), "Incorrect IMDb ID.")

    @mock.patch("films.omdb.requests.get")
    def test_network_failure_raises_upstream_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")

        with self.assertRaises(UpstreamError):
            fetch_movie_details("tt0111161")

    def test_clean_maps_missing_values_to_empty_string(self):
        self.assertEqual(clean("N/A"), "")
        self.assertEqual(clean(None), "")
        self.assertEqual(clean(" 142 min "), "142 min")


class BlobClientTests(TestCase):
    @override_settings(
        BLOB_API_URL="https://blob.example.com/",
        BLOB_READ_WRITE_TOKEN="blob-token",
    )
    @mock.patch("films.blob.requests.put")
    def test_put_returns_public_url(self, mock_put):
        mock_put.return_value = http_response(
            json_data={"url": "https://public.example.com/posters/tt1.jpg"}
        )

        url = blob_put("posters/tt1.jpg", b"jpeg-bytes")

        self.assertEqual(url, "https://public.example.com/posters/tt1.jpg")
        args, kwargs = mock_put.call_args
        self.assertEqual(args[0], "https://blob.example.com/posters/tt1.jpg")
        self.assertEqual(kwargs["data"], b"jpeg-bytes")
        self.assertEqual(kwargs["headers"]["authorization"], "Bearer blob-token")
        self.assertEqual(kwargs["headers"]["x-add-random-suffix"], "0")

    @mock.patch("films.blob.requests.put")
    def test_http_error_propagates(self, mock_put):
        mock_put.return_value = http_response(status_code=403)

        with self.assertRaises(requests.HTTPError):
            blob_put("posters/tt1.jpg", b"jpeg-bytes")


class CompressPosterTests(TestCase):
    def test_wide_image_is_scaled_to_max_width(self):
        body = compress_poster(make_image_bytes(1000, 1500))

        with Image.open(BytesIO(body)) as image:
            self.assertEqual(image.format, "JPEG")
            self.assertEqual(image.size, (POSTER_MAX_WIDTH, 600))

    def test_small_image_is_not_enlarged(self):
        body = compress_poster(make_image_bytes(200, 300, fmt="JPEG", mode="RGB"))

        with Image.open(BytesIO(body)) as image:
            self.assertEqual(image.size, (200, 300))

    def test_garbage_bytes_raise(self):
        with self.assertRaises(UnidentifiedImageError):
            compress_poster(b"not an image")


@override_settings(BLOB_READ_WRITE_TOKEN="blob-token")
class ArchivePosterTests(TestCase):
    @mock.patch("films.services.posters.requests.get")
    def test_empty_and_sentinel_urls_are_returned_untouched(self, mock_get):
        self.assertEqual(archive_poster("", "tt1"), ArchivedPoster("", False))
        self.assertEqual(archive_poster("N/A", "tt1"), ArchivedPoster("N/A", False))
        mock_get.assert_not_called()

    @mock.patch("films.services.posters.requests.get")
    def test_unreachable_url_falls_back_to_source(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("unreachable")

        result = archive_poster("https://unreachable.invalid/p.jpg", "tt1")

        self.assertEqual(result.url, "https://unreachable.invalid/p.jpg")
        self.assertFalse(result.archived)

    @mock.patch("films.services.posters.blob_put")
    @mock.patch("films.services.posters.requests.get")
    def test_non_success_status_falls_back_without_upload(self, mock_get, mock_put):
        mock_get.return_value = http_response(status_code=404)

        result = archive_poster(POSTER_URL, "tt0111161")

        self.assertEqual(result, ArchivedPoster(POSTER_URL, False))
        mock_put.assert_not_called()

    @mock.patch("films.services.posters.blob_put")
    @mock.patch("films.services.posters.requests.get")
    def test_successful_archival_uploads_under_deterministic_key(self, mock_get, mock_put):
        mock_get.return_value = http_response(content=make_image_bytes(800, 1200))
        mock_put.return_value = "https://blob.example.com/posters/tt0111161.jpg"

        result = archive_poster(POSTER_URL, "tt0111161")

        self.assertEqual(
            result,
            ArchivedPoster("https://blob.example.com/posters/tt0111161.jpg", True),
        )
        key, body = mock_put.call_args[0]
        self.assertEqual(key, poster_key("tt0111161"))
        self.assertEqual(key, "posters/tt0111161.jpg")
        with Image.open(BytesIO(body)) as image:
            self.assertEqual(image.width, POSTER_MAX_WIDTH)

    @mock.patch("films.services.posters.blob_put")
    @mock.patch("films.services.posters.requests.get")
    def test_upload_failure_falls_back_to_source(self, mock_get, mock_put):
        mock_get.return_value = http_response(content=make_image_bytes(500, 750))
        mock_put.side_effect = requests.HTTPError("403")

        result = archive_poster(POSTER_URL, "tt0111161")

        self.assertEqual(result, ArchivedPoster(POSTER_URL, False))

    @mock.patch("films.services.posters.requests.get")
    def test_undecodable_image_falls_back_to_source(self, mock_get):
        mock_get.return_value = http_response(content=b"<html>not a poster</html>")

        result = archive_poster(POSTER_URL, "tt0111161")

        self.assertEqual(result, ArchivedPoster(POSTER_URL, False))

    @mock.patch("films.services.posters.POSTER_MAX_BYTES", 1024)
    @mock.patch("films.services.posters.blob_put")
    @mock.patch("films.services.posters.requests.get")
    def test_oversized_download_falls_back_without_upload(self, mock_get, mock_put):
        mock_get.return_value = http_response(content=b"x" * 200_000)

        result = archive_poster(POSTER_URL, "tt0111161")

        self.assertEqual(result, ArchivedPoster(POSTER_URL, False))
        mock_put.assert_not_called()
        _, kwargs = mock_get.call_args
        self.assertTrue(kwargs["stream"])

    @override_settings(BLOB_READ_WRITE_TOKEN="")
    @mock.patch("films.services.posters.requests.get")
    def test_archival_skipped_without_blob_token(self, mock_get):
        result = archive_poster(POSTER_URL, "tt0111161")

        self.assertEqual(result, ArchivedPoster(POSTER_URL, False))
        mock_get.assert_not_called()


class EnsureFilmTests(TestCase):
    @mock.patch("films.services.catalog.archive_poster")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_second_call_is_served_from_catalog(self, mock_fetch, mock_archive):
        mock_fetch.return_value = OMDB_SHAWSHANK
        mock_archive.return_value = ArchivedPoster(
            "https://blob.example.com/posters/tt0111161.jpg", True
        )

        first = ensure_film("tt0111161")
        second = ensure_film("tt0111161")

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(mock_fetch.call_count, 1)
        self.assertEqual(Film.objects.count(), 1)

        film = Film.objects.get()
        self.assertEqual(film.title, "The Shawshank Redemption")
        self.assertEqual(film.year, "1994")
        self.assertEqual(film.runtime, "142 min")
        self.assertEqual(film.director, "Frank Darabont")
        self.assertEqual(film.genre, "Drama")
        self.assertEqual(film.poster_url, "https://blob.example.com/posters/tt0111161.jpg")
        mock_archive.assert_called_once_with(POSTER_URL, "tt0111161")

    @mock.patch("films.services.catalog.archive_poster")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_existing_row_is_returned_unchanged(self, mock_fetch, mock_archive):
        Film.objects.create(imdb_id="tt0068646", title="The Godfather", year="1972")

        film = ensure_film("tt0068646", {"title": "Something Else"})

        self.assertEqual(film.title, "The Godfather")
        mock_fetch.assert_not_called()
        mock_archive.assert_not_called()

    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_upstream_miss_creates_nothing(self, mock_fetch):
        mock_fetch.side_effect = UpstreamError("Incorrect IMDb ID.")

        with self.assertRaises(UpstreamError):
            ensure_film("tt9999999")
        self.assertFalse(Film.objects.exists())

    @override_settings(BLOB_READ_WRITE_TOKEN="blob-token")
    @mock.patch("films.services.posters.requests.get")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_poster_failure_keeps_provider_url(self, mock_fetch, mock_get):
        mock_fetch.return_value = OMDB_SHAWSHANK
        mock_get.side_effect = requests.Timeout("slow")

        film = ensure_film("tt0111161")

        self.assertEqual(film.poster_url, POSTER_URL)

    @mock.patch("films.services.catalog.archive_poster")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_client_hints_fill_missing_provider_values(self, mock_fetch, mock_archive):
        mock_fetch.return_value = {
            "Title": "N/A",
            "Year": "N/A",
            "Poster": "N/A",
            "Director": "N/A",
            "Response": "True",
        }
        mock_archive.side_effect = lambda url, imdb_id: ArchivedPoster(url, False)

        film = ensure_film(
            "tt0000001",
            {"title": "Hinted", "year": "2001", "poster_url": "https://img/p.jpg"},
        )

        self.assertEqual(film.title, "Hinted")
        self.assertEqual(film.year, "2001")
        self.assertEqual(film.director, "")
        self.assertEqual(film.poster_url, "https://img/p.jpg")

    @mock.patch("films.services.catalog.archive_poster")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_missing_values_in_provider_and_hints_are_stored_empty(
        self, mock_fetch, mock_archive
    ):
        mock_fetch.return_value = {
            "Title": "Known Title",
            "Year": "N/A",
            "Poster": "N/A",
            "Response": "True",
        }
        mock_archive.side_effect = lambda url, imdb_id: ArchivedPoster(url, False)

        film = ensure_film(
            "tt0000005",
            {"title": "N/A", "year": "N/A", "poster_url": "N/A"},
        )

        film.refresh_from_db()
        self.assertEqual(film.title, "Known Title")
        self.assertEqual(film.year, "")
        self.assertEqual(film.poster_url, "")
        mock_archive.assert_called_once_with("", "tt0000005")

    @mock.patch("films.services.catalog.archive_poster")
    @mock.patch("films.services.catalog.fetch_movie_details")
    def test_title_falls_back_to_imdb_id_when_unknown(self, mock_fetch, mock_archive):
        mock_fetch.return_value = {"Title": "N/A", "Response": "True"}
        mock_archive.side_effect = lambda url, imdb_id: ArchivedPoster(url, False)

        film = ensure_film("tt0000006", {"title": "N/A"})

        self.assertEqual(film.title, "tt0000006")


class EnsureFilmsCommandTests(TestCase):
    @mock.patch("films.management.commands.ensure_films.ensure_film")
    def test_reports_created_existing_and_failed(self, mock_ensure):
        Film.objects.create(imdb_id="tt0068646", title="The Godfather", year="1972")

        def fake_ensure(imdb_id):
            if imdb_id == "tt0000000":
                raise UpstreamError("Incorrect IMDb ID.")
            return Film.objects.create(imdb_id=imdb_id, title="New", year="2000")

        mock_ensure.side_effect = fake_ensure
        out, err = StringIO(), StringIO()

        call_command(
            "ensure_films", "tt0068646", "tt0111161", "tt0000000",
            stdout=out, stderr=err,
        )

        self.assertIn("Created 1, already present 1, failed 1.", out.getvalue())
        self.assertIn("tt0000000: Incorrect IMDb ID.", err.getvalue())
        self.assertTrue(Film.objects.filter(imdb_id="tt0111161").exists())
