import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Union

import requests

from .errors import MalformedDocumentError, NoRootError, SourceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def parse_document(document: Union[str, bytes]) -> List[ET.Element]:
    """Parse markup into the list of top-level elements the builder consumes."""

    if not isinstance(document, (str, bytes)):
        raise SourceError("document must be str or bytes.")
    if not document.strip():
        raise NoRootError("No root element found in document.")

    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise MalformedDocumentError(f"Malformed document: {exc}") from exc

    # ElementTree drops top-level comments and processing instructions, leaving one root.
    return [root]


def _is_url(location: str) -> bool:
    return location.lower().startswith(("http://", "https://"))


def fetch_document(url: str, *, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise SourceError(f"Could not fetch {url}: {exc}") from exc

    if response.status_code >= 400:
        raise SourceError(f"HTTP error {response.status_code} while fetching {url}")
    logger.debug("Fetched %d bytes from %s", len(response.content), url)
    return response.content


def read_document(path: Union[str, Path]) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise SourceError(f"Could not read {path}: {exc}") from exc


def load_document(location: Union[str, Path], *, timeout: float = DEFAULT_TIMEOUT) -> List[ET.Element]:
    if isinstance(location, str) and _is_url(location):
        payload = fetch_document(location, timeout=timeout)
    else:
        payload = read_document(location)
    return parse_document(payload)
