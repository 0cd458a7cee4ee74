"""
Image Handler

Utilities for downloading and validating images.

Downloading images: Supports only plain GET requests for image files specified by url, with no
expectation of authentication. Building the urls is left to the Bing handler.

A download names the stored file after the basename of the url that was actually used, and an
existing file is never overwritten. Running bingsy twice on the same day therefore costs no
second download.
"""

from pathlib import Path
from urllib.parse import urlparse
from typing import Optional

from PIL import Image, UnidentifiedImageError
import requests

from bingsy.cli_utils.console import describe

CHUNK_SIZE = 64 * 1024


class InvalidImageError(Exception):
    """
    Raised when a provided binary input file is not an image. Wrapper around the PIL
    UnidentifiedImageError for better identification of errors during debugging
    and custom error messaging.
    """

    pass


class ImageDownloadError(Exception):
    """
    Raised when an image download is unsuccessful.
    """

    pass


def validate_image(input) -> str:
    """
    Determine whether input is a valid image and return its format, e.g. "JPEG". PIL open accepts a
    Path object, string, or file object. It only reads the header to determine the file type, so it
    is safe to use as a validation method.
    """

    try:
        with Image.open(input) as image:

            return image.format

    except UnidentifiedImageError:
        raise InvalidImageError(f"Input {str(input)} does not appear to be an image.")

    except FileNotFoundError:
        raise InvalidImageError(f"Input {str(input)} could not be found.")


def file_name(url: str) -> str:
    """
    Basename of the url path, ignoring any query string.
    """

    name = Path(urlparse(url).path).name
    if not name:
        raise ImageDownloadError(f"cannot derive a file name from {url}")

    return name


def _get(url: str, timeout: Optional[float]) -> requests.Response:
    """
    Open a streamed GET request. Any failure, including a bad status code, is raised as a
    RequestException so that callers can fall back on a single exception type.
    """

    r = requests.get(url, stream=True, timeout=timeout)
    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError:
        r.close()
        raise

    return r


def _save(r: requests.Response, destination_path: Path):
    """
    Stream the body of r into destination_path. A partially written file is removed on failure.
    """

    try:
        with r, open(destination_path, "xb") as file:
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                file.write(chunk)

    except FileExistsError:
        raise ImageDownloadError(f"File already exists at {destination_path}.")

    except (OSError, requests.exceptions.RequestException) as error:
        destination_path.unlink(missing_ok=True)
        raise ImageDownloadError(f"copy image: {error}")


def download_image(
    preferred_url: str,
    fallback_url: str,
    image_dir: Path,
    timeout: Optional[float] = None,
) -> Path:
    """
    Download the image at preferred_url into image_dir. If that request fails, either at transport
    level or with a bad status code, download fallback_url instead. Returns the absolute path of
    the stored image.

    Before each request the target file is checked: if an image with that name is already in
    image_dir it is returned as is, without touching the network.
    """

    image_dir = Path(image_dir).expanduser().resolve()

    if image_dir.exists() and not image_dir.is_dir():
        raise ImageDownloadError(f"Destination {image_dir} is not a directory.")

    r = None

    for url in (preferred_url, fallback_url):
        try:
            destination_path = image_dir / file_name(url)

            if destination_path.is_file():
                describe(
                    f":floppy_disk-emoji: '{destination_path.name}' already in {image_dir}"
                )
                return destination_path

            r = _get(url, timeout)

        # a url without a path, e.g. from an empty urlBase, is as unusable as an unreachable one
        except (ImageDownloadError, requests.exceptions.RequestException) as error:
            if url == fallback_url:
                raise ImageDownloadError(f"fetch image data: {error}")

            describe(f"{url} unavailable ({error}), falling back to default image")
            continue

        break

    describe(f":earth_asia-emoji: getting image from {url} ...")
    _save(r, destination_path)

    return destination_path
