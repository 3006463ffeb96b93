import requests
from django.conf import settings

from movielog.exceptions import UpstreamError

OMDB_BASE_URL = "https://www.omdbapi.com/"

# OMDb's placeholder for "no value"
OMDB_MISSING = "N/A"


def omdb_get(params=None):
    if params is None:
        params = {}
    params["apikey"] = settings.OMDB_API_KEY
    try:
        response = requests.get(
            OMDB_BASE_URL, params=params, timeout=settings.OMDB_TIMEOUT
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpstreamError(f"OMDb request failed: {exc}") from exc

    # OMDb answers 200 with Response "False" when nothing matches
    if data.get("Response") == "False":
        raise UpstreamError(data.get("Error") or "OMDb returned no result.")
    return data


def fetch_movie_details(imdb_id):
    return omdb_get({"i": imdb_id})


def clean(value):
    """Return an OMDb field as a plain string, mapping N/A to ''."""
    if value is None or value == OMDB_MISSING:
        return ""
    return str(value).strip()
