"""
Bing Image Archive - URL Builder and Metadata Fetcher

This module is a wrapper around the public, unauthenticated Bing HPImageArchive endpoint. The endpoint
answers a GET request with a small XML document describing the image of the day (or of a previous day):

    <images>
        <image>
            <startdate>20240101</startdate>
            <enddate>20240102</enddate>
            <url>/az/hprichbg/rb/Sample_EN-US1234567890_1920x1080.jpg</url>
            <urlBase>/az/hprichbg/rb/Sample_EN-US1234567890</urlBase>
            <copyright>Some place, Some country (c) Someone</copyright>
            ...
        </image>
    </images>

The functions here build the metadata and image urls and turn the XML into ImageMetadata records.
Downloading the image itself is left to the image handler.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from xml.etree import ElementTree

import requests

BING_HOST = "http://www.bing.com"
METADATA_PATH = "/HPImageArchive.aspx"


class FetchError(Exception):
    """
    Raised when the metadata request fails, either at transport level or with a bad status code.
    """

    pass


class ParseError(Exception):
    """
    Raised when the metadata response body is not the XML document we expect.
    """

    pass


def date_label(date: str) -> str:
    """
    Format a YYYYMMDD date as a short month/day label, e.g. "20240102" -> "Jan 2".
    Return an empty string if the date can't be parsed.
    """

    try:
        parsed = datetime.strptime(date, "%Y%m%d")

    except (TypeError, ValueError):
        return ""

    return f"{parsed:%b} {parsed.day}"


@dataclass(frozen=True)
class ImageMetadata:
    """
    One <image> element of the archive response.
    """

    url: str
    url_base: str
    start_date: str
    end_date: str
    copyright: str

    @property
    def start_label(self) -> str:
        return date_label(self.start_date)

    @property
    def end_label(self) -> str:
        return date_label(self.end_date)


@dataclass(frozen=True)
class MetadataResponse:
    """
    The images of an archive response, in document order.
    """

    images: tuple[ImageMetadata, ...] = ()

    @property
    def first(self) -> ImageMetadata:
        if not self.images:
            raise ParseError("image metadata contains no images")

        return self.images[0]


def metadata_url(index: int = 0, count: int = 1, market: str = "en-UK") -> str:
    """
    Build the archive url. index 0 is today, 1 is yesterday and so on.
    """

    return f"{BING_HOST}{METADATA_PATH}?format=xml&idx={index}&n={count}&mkt={market}"


def preferred_image_url(url_base: str, resolution: str) -> str:
    """
    Build the url of the image at a specific resolution, e.g. ".../Sample_EN-US1234567890_1920x1080.jpg".
    """

    return f"{BING_HOST}{url_base}_{resolution}.jpg"


def default_image_url(url: str) -> str:
    """
    Build the url of the image as served by default.
    """

    return f"{BING_HOST}{url}"


def _text(element: ElementTree.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""

    return child.text.strip()


def parse_metadata(content: bytes) -> MetadataResponse:
    """
    Parse the archive XML into a MetadataResponse. Raise ParseError for malformed XML.
    Missing fields of an image element are left empty.
    """

    try:
        root = ElementTree.fromstring(content)

    except ElementTree.ParseError as error:
        raise ParseError(f"parse image meta: {error}")

    images = tuple(
        ImageMetadata(
            url=_text(image, "url"),
            url_base=_text(image, "urlBase"),
            start_date=_text(image, "startdate"),
            end_date=_text(image, "enddate"),
            copyright=_text(image, "copyright"),
        )
        for image in root.iter("image")
    )

    return MetadataResponse(images=images)


def fetch_metadata(url: str, timeout: Optional[float] = None) -> MetadataResponse:
    """
    GET the archive document at url and parse it. There is no retry here; reachability of the
    service is checked once by the network handler before this is called.
    """

    try:
        r = requests.get(url, timeout=timeout)

    except requests.exceptions.RequestException as error:
        raise FetchError(f"fetch image meta: {error}")

    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError:
        raise FetchError(
            f"fetch image meta: something went wrong trying to access {url} (status code {r.status_code})"
        )

    return parse_metadata(r.content)
