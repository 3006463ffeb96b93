import requests
from django.conf import settings

BLOB_API_VERSION = "7"


def blob_put(pathname, body, content_type="image/jpeg"):
    """
    Upload `body` to the blob store under `pathname` and return the
    public URL. The same pathname always maps to the same object.
    """
    response = requests.put(
        f"{settings.BLOB_API_URL.rstrip('/')}/{pathname}",
        data=body,
        headers={
            "authorization": f"Bearer {settings.BLOB_READ_WRITE_TOKEN}",
            "x-api-version": BLOB_API_VERSION,
            "x-content-type": content_type,
            "x-add-random-suffix": "0",
            "x-allow-overwrite": "1",
        },
        timeout=settings.BLOB_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()["url"]
