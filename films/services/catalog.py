import logging

from films.models import Film
from films.omdb import fetch_movie_details, clean
from films.services.posters import archive_poster

logger = logging.getLogger(__name__)


def ensure_film(imdb_id, hint=None):
    """
    Return the catalog row for `imdb_id`, creating it on first use.

    Existing rows are returned as they are. A missing row is built from
    OMDb (UpstreamError when OMDb has no match); `hint` values sent by
    the client only fill fields OMDb leaves empty. The poster goes
    through archival, which degrades to the source URL on failure.
    """
    film = Film.objects.filter(imdb_id=imdb_id).first()
    if film is not None:
        return film

    hint = hint or {}
    details = fetch_movie_details(imdb_id)

    source_poster = clean(details.get("Poster")) or clean(hint.get("poster_url"))
    poster = archive_poster(source_poster, imdb_id)

    film, created = Film.objects.get_or_create(
        imdb_id=imdb_id,
        defaults={
            "title": clean(details.get("Title")) or clean(hint.get("title")) or imdb_id,
            "year": clean(details.get("Year")) or clean(hint.get("year")),
            "runtime": clean(details.get("Runtime")),
            "director": clean(details.get("Director")),
            "actors": clean(details.get("Actors")),
            "genre": clean(details.get("Genre")),
            "poster_url": poster.url,
        },
    )
    if created:
        logger.info(
            "Added %s to catalog (poster %s)",
            film,
            "archived" if poster.archived else "kept at source",
        )
    return film
