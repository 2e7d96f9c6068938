"""
Document schemas, loaders and validation.

This package provides Pydantic models for both supported document dialects
(IIIF Presentation 2.1 manifests and legacy asset-sequence packages), along
with loaders that resolve lazily referenced sequences, and validation.

Basic usage:
    >>> from quire.document import load_document, validate_document
    >>>
    >>> document = load_document("https://example.org/manifest.json")
    >>> issues = validate_document(document)
    >>> for issue in issues:
    ...     print(f"{issue.path}: {issue.message}")

Selecting a sequence other than the first:
    >>> document = load_document(url, sequence_index=1)
"""

from .models import (
    Dialect,
    Document,
    Manifest,
    Canvas,
    Range,
    Sequence,
    Annotation,
    ImageResource,
    ImageService,
    Package,
    AssetSequence,
    Asset,
    Section,
    Manifestation,
    label_text,
)
from .loaders import (
    DocumentNotFoundError,
    JSONP_CALLBACK,
    Fetcher,
    detect_dialect,
    document_sequences,
    fetch_json,
    fetch_jsonp,
    is_sequence_reference,
    is_url,
    load_document,
    load_json,
    parse_document,
    parse_manifest,
    parse_package,
    resolve_sequence,
    sequence_reference_uri,
)
from .validation import (
    ValidationIssue,
    validate_document,
    validate_manifest,
    validate_package,
)

__all__ = [
    # Models
    "Dialect",
    "Document",
    "Manifest",
    "Canvas",
    "Range",
    "Sequence",
    "Annotation",
    "ImageResource",
    "ImageService",
    "Package",
    "AssetSequence",
    "Asset",
    "Section",
    "Manifestation",
    "label_text",
    # Loaders
    "DocumentNotFoundError",
    "JSONP_CALLBACK",
    "Fetcher",
    "detect_dialect",
    "document_sequences",
    "fetch_json",
    "fetch_jsonp",
    "is_sequence_reference",
    "is_url",
    "load_document",
    "load_json",
    "parse_document",
    "parse_manifest",
    "parse_package",
    "resolve_sequence",
    "sequence_reference_uri",
    # Validation
    "ValidationIssue",
    "validate_document",
    "validate_manifest",
    "validate_package",
]
