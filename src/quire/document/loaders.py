"""
Loading, parsing and sequence resolution for documents.

This is the fetching side of the viewer: it turns a URI into a parsed
document whose selected sequence is fully inline, ready to hand to a
provider. The navigation engine itself performs no I/O apart from calling
back into ``fetch_json``/``fetch_jsonp`` when a provider reloads.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
import json
import logging
import re

import httpx

from .models import Dialect, Document, Manifest, Package, Sequence, AssetSequence


LOGGER = logging.getLogger(__name__)

JSONP_CALLBACK = "manifestCallback"

Fetcher = Callable[[str], dict[str, Any]]


class DocumentNotFoundError(LookupError):
    """No usable sequence list (or selected sequence) in a document."""


def fetch_json(
    url: str, *, timeout: float = 10.0, client: httpx.Client | None = None
) -> dict[str, Any]:
    """
    Fetch JSON from URL.

    Parameters:
        url: HTTP(S) URL to fetch
        timeout: Request timeout in seconds
        client: Optional pre-configured client (closed by the caller)

    Returns:
        Parsed JSON as dictionary

    Raises:
        httpx.HTTPError: If request fails
        json.JSONDecodeError: If response is not valid JSON
    """
    if client is not None:
        resp = client.get(url)
        resp.raise_for_status()
        return resp.json()

    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        resp = client.get(url)
        resp.raise_for_status()
        return resp.json()


def fetch_jsonp(
    url: str,
    *,
    callback: str = JSONP_CALLBACK,
    timeout: float = 10.0,
    client: httpx.Client | None = None,
) -> dict[str, Any]:
    """
    Fetch a JSONP-wrapped document.

    Fallback transport for servers that do not send CORS headers. The
    callback name is passed in the ``callback`` query parameter and the
    response body ``<callback>(...)`` is unwrapped.

    Raises:
        httpx.HTTPError: If request fails
        ValueError: If the body is not wrapped in the expected callback
    """
    request_url = str(httpx.URL(url).copy_add_param("callback", callback))

    if client is not None:
        resp = client.get(request_url)
        resp.raise_for_status()
        body = resp.text
    else:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            resp = client.get(request_url)
            resp.raise_for_status()
            body = resp.text

    match = re.match(
        rf"^\s*{re.escape(callback)}\s*\((.*)\)\s*;?\s*$", body, flags=re.DOTALL
    )
    if match is None:
        raise ValueError(f"Response is not wrapped in {callback}(...)")
    return json.loads(match.group(1))


def load_json(path_or_url: str) -> dict[str, Any]:
    """
    Load JSON from file path or URL.

    Example:
        >>> data = load_json("https://example.org/manifest.json")
        >>> data = load_json("/path/to/manifest.json")
    """
    if is_url(path_or_url):
        return fetch_json(path_or_url)

    p = Path(path_or_url).expanduser()
    return json.loads(p.read_text(encoding="utf-8"))


def is_url(path_or_url: str) -> bool:
    return path_or_url.startswith("http://") or path_or_url.startswith("https://")


def detect_dialect(data: Any) -> Dialect | None:
    """
    Work out which dialect a raw document is written in.

    Returns:
        "iiif" when the document has a ``sequences`` list, "legacy" when it
        has an ``assetSequences`` list, None otherwise
    """
    if not isinstance(data, dict):
        return None
    if isinstance(data.get("sequences"), list):
        return "iiif"
    if isinstance(data.get("assetSequences"), list):
        return "legacy"
    return None


def parse_manifest(data: dict[str, Any]) -> Manifest:
    """
    Parse dialect A manifest dict into Pydantic model.

    Raises:
        pydantic.ValidationError: If JSON doesn't match manifest schema
    """
    return Manifest.model_validate(data)


def parse_package(data: dict[str, Any]) -> Package:
    """
    Parse dialect B package dict into Pydantic model.

    Raises:
        pydantic.ValidationError: If JSON doesn't match package schema
    """
    return Package.model_validate(data)


def parse_document(data: Any) -> Document:
    """
    Parse a raw document of either dialect.

    Raises:
        DocumentNotFoundError: If the data is not an object or neither
            dialect's sequence list is present
        pydantic.ValidationError: If JSON doesn't match the dialect's schema
    """
    dialect = detect_dialect(data)
    if dialect == "iiif":
        return parse_manifest(data)
    if dialect == "legacy":
        return parse_package(data)
    raise DocumentNotFoundError("Document has neither sequences[] nor assetSequences[]")


def document_sequences(document: Document) -> list[Sequence] | list[AssetSequence]:
    if isinstance(document, Manifest):
        return document.sequences
    return document.asset_sequences


def is_sequence_reference(sequence: Sequence | AssetSequence) -> bool:
    return sequence.is_reference


def sequence_reference_uri(
    document: Document, index: int, manifest_uri: str | None = None
) -> str | None:
    """
    URI a reference stub points at.

    Dialect A stubs carry an absolute ``@id``. Dialect B ``$ref`` values are
    relative to the directory of the package URI.

    Returns:
        URI to fetch, or None if the sequence is inline or cannot be located
    """
    sequences = document_sequences(document)
    sequence = sequences[index]
    if not sequence.is_reference:
        return None

    if isinstance(sequence, Sequence):
        return sequence.id

    if manifest_uri is None:
        return sequence.ref
    base = manifest_uri[: manifest_uri.rfind("/") + 1]
    return base + sequence.ref


def resolve_sequence(
    document: Document,
    index: int,
    *,
    manifest_uri: str | None = None,
    fetch: Fetcher = fetch_json,
) -> Document:
    """
    Make sure the selected sequence is inline.

    Parameters:
        document: Parsed document
        index: Zero-based index of the selected sequence
        manifest_uri: URI the document was loaded from (dialect B refs are
            relative to it)
        fetch: Transport used for the referenced sequence

    Returns:
        The document itself when the sequence is already inline, otherwise
        a copy with the referenced sequence fetched into its slot

    Raises:
        DocumentNotFoundError: If ``index`` is out of range or the stub has
            nothing to fetch
        httpx.HTTPError: If the fetch fails
    """
    sequences = document_sequences(document)
    if not 0 <= index < len(sequences):
        raise DocumentNotFoundError(
            f"Sequence {index} not found ({len(sequences)} sequence(s))"
        )

    uri = sequence_reference_uri(document, index, manifest_uri)
    if uri is None:
        if sequences[index].is_reference:
            raise DocumentNotFoundError(f"Sequence {index} is a reference without a URI")
        return document

    LOGGER.info("resolve_sequence", extra={"sequence_index": index, "uri": uri})
    data = fetch(uri)

    resolved = list(sequences)
    if isinstance(document, Manifest):
        resolved[index] = Sequence.model_validate(data)
        return document.model_copy(update={"sequences": resolved})

    resolved[index] = AssetSequence.model_validate(data)
    return document.model_copy(update={"asset_sequences": resolved})


def load_document(
    uri: str,
    *,
    sequence_index: int = 0,
    data_base_uri: str | None = None,
    fetch: Fetcher | None = None,
) -> Document:
    """
    Load, parse and resolve a document in one call.

    Parameters:
        uri: File path or URL of the document
        sequence_index: Sequence that will be viewed
        data_base_uri: Optional prefix joined onto ``uri``
        fetch: Transport (defaults to load_json, which reads paths from
            disk and fetches URLs)

    Raises:
        DocumentNotFoundError: If the document has no usable sequence
        FileNotFoundError: If file path doesn't exist
        httpx.HTTPError: If URL fetch fails
        pydantic.ValidationError: If JSON doesn't match the schema

    Example:
        >>> document = load_document("https://example.org/manifest.json")
        >>> provider = create_provider(document)
    """
    if data_base_uri:
        uri = data_base_uri + uri

    if fetch is None:
        fetch = load_json

    data = fetch(uri)
    document = parse_document(data)
    return resolve_sequence(document, sequence_index, manifest_uri=uri, fetch=fetch)
