"""
Pydantic models for the two supported document dialects.

Dialect A ("iiif") follows IIIF Presentation 2.1: a manifest holds sequences
of canvases and a flat list of ranges ("structures"). Dialect B ("legacy") is
the older package format: a package holds asset sequences of assets, each
with a tree of sections, plus a manifestation tree tying sequences together.

The models are permissive: unknown fields are kept and most fields are
optional, since real-world documents routinely omit them.
"""

from __future__ import annotations

from typing import Any, Literal, Union
from pydantic import BaseModel, Field, ConfigDict


Dialect = Literal["iiif", "legacy"]


def label_text(value: Any) -> str | None:
    """
    Flatten a label value to plain text.

    Labels may be plain strings, JSON-LD value objects ({"@value": ...}),
    language maps ({"en": ["..."]}) or lists of any of these. The first
    usable string wins.

    Example:
        >>> label_text([{"@value": "Folio 1r", "@language": "en"}])
        'Folio 1r'
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        for item in value:
            text = label_text(item)
            if text is not None:
                return text
        return None
    if isinstance(value, dict):
        if "@value" in value:
            return label_text(value["@value"])
        for item in value.values():
            text = label_text(item)
            if text is not None:
                return text
    return None


# -- dialect A ---------------------------------------------------------------


class ImageService(BaseModel):
    """
    IIIF Image API service descriptor.

    Used to build thumbnail URLs for canvases.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="@id")
    type: str | None = Field(default=None, alias="@type")
    profile: str | list[Any] | None = None
    context: str | list[Any] | None = Field(default=None, alias="@context")

    def image_url(
        self,
        *,
        region: str = "full",
        size: str = "full",
        rotation: str = "0",
        quality: str = "default",
        fmt: str = "jpg",
    ) -> str:
        """
        Generate IIIF Image API URL.

        Example:
            >>> service = ImageService(id="https://iiif.example.org/image1")
            >>> service.image_url(size="100,150")
            'https://iiif.example.org/image1/full/100,150/0/default.jpg'
        """
        base = self.id.rstrip("/")
        return f"{base}/{region}/{size}/{rotation}/{quality}.{fmt}"


class ImageResource(BaseModel):
    """Image resource painted onto a canvas by an annotation."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = Field(default=None, alias="@id")
    type: str | None = Field(default=None, alias="@type")
    format: str | None = None
    width: int | None = None
    height: int | None = None
    service: ImageService | list[ImageService] | None = None

    def first_service(self) -> ImageService | None:
        if self.service is None:
            return None
        if isinstance(self.service, ImageService):
            return self.service
        if isinstance(self.service, list) and len(self.service) > 0:
            return self.service[0]
        return None


class Annotation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = Field(default=None, alias="@id")
    type: str | None = Field(default=None, alias="@type")
    motivation: str | None = None
    resource: ImageResource
    on: str | None = None


class Canvas(BaseModel):
    """
    IIIF canvas (one page or view).

    The label is what readers type into a "go to page" box, so it drives
    label search as well as display.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="@id")
    type: str | None = Field(default=None, alias="@type")
    label: str | dict | list | None = None
    width: int | None = None
    height: int | None = None
    images: list[Annotation] = Field(default_factory=list)

    def label_text(self) -> str | None:
        return label_text(self.label)

    def primary_image_service(self) -> ImageService | None:
        """
        Get the image service of the first image annotation.

        Returns:
            Primary ImageService if available, None otherwise
        """
        if not self.images:
            return None
        return self.images[0].resource.first_service()

    def image_url(
        self,
        *,
        region: str = "full",
        size: str = "full",
        rotation: str = "0",
        quality: str = "default",
        fmt: str = "jpg",
    ) -> str | None:
        service = self.primary_image_service()
        if service is None:
            return None
        return service.image_url(
            region=region, size=size, rotation=rotation, quality=quality, fmt=fmt
        )


class Range(BaseModel):
    """
    IIIF range (a chapter, section or other structural division).

    Child ranges and member canvases may be given as id strings or embedded
    objects; member canvases may also be given as integer indices into the
    active sequence. Resolution happens in the navigation graph builder.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = Field(default=None, alias="@id")
    type: str | None = Field(default=None, alias="@type")
    label: str | dict | list | None = None
    viewing_hint: str | None = Field(default=None, alias="viewingHint")
    ranges: list[Union[str, "Range"]] = Field(default_factory=list)
    canvases: list[Union[str, int, dict[str, Any]]] = Field(default_factory=list)

    def label_text(self) -> str | None:
        return label_text(self.label)


class Sequence(BaseModel):
    """
    IIIF sequence (ordered list of canvases).

    A sequence without a ``canvases`` key is a reference stub: a pointer to
    a separately published sequence document that has not been fetched yet.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = Field(default=None, alias="@id")
    type: str | None = Field(default=None, alias="@type")
    label: str | dict | list | None = None
    viewing_direction: str | None = Field(default=None, alias="viewingDirection")
    viewing_hint: str | None = Field(default=None, alias="viewingHint")
    start_canvas: str | None = Field(default=None, alias="startCanvas")
    canvases: list[Canvas] | None = None

    @property
    def is_reference(self) -> bool:
        return self.canvases is None


class Manifest(BaseModel):
    """
    IIIF Presentation 2.1 manifest (dialect A document root).

    ``structures`` is the manifest's flat list of ranges; the hierarchy is
    expressed through each range's ``ranges`` references.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="@id")
    type: str | None = Field(default=None, alias="@type")
    label: str | dict | list | None = None
    description: str | dict | list | None = None
    metadata: list[dict[str, Any]] | None = None
    attribution: str | dict | list | None = None
    license: str | list[Any] | None = None
    logo: str | dict[str, Any] | None = None
    see_also: str | dict[str, Any] | list[Any] | None = Field(default=None, alias="seeAlso")
    sequences: list[Sequence] = Field(default_factory=list)
    structures: list[Range] = Field(default_factory=list)

    def label_text(self) -> str | None:
        return label_text(self.label)


# -- dialect B ---------------------------------------------------------------


class Asset(BaseModel):
    """
    Legacy asset (one page or media file).

    ``orderLabel`` is the printed page label of the asset.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    order_label: str | None = Field(default=None, alias="orderLabel")
    file_uri: str | None = Field(default=None, alias="fileUri")
    dzi_uri: str | None = Field(default=None, alias="dziUri")
    media_uri: str | None = Field(default=None, alias="mediaUri")
    width: int | None = None
    height: int | None = None


class Section(BaseModel):
    """Legacy section; ``assets`` holds indices into the sequence's assets."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = Field(default=None, alias="@id")
    section_type: str | None = Field(default=None, alias="sectionType")
    title: str | None = None
    assets: list[int] = Field(default_factory=list)
    sections: list["Section"] = Field(default_factory=list)


class AssetSequence(BaseModel):
    """
    Legacy asset sequence.

    A sequence carrying ``$ref`` is a reference stub, relative to the
    package's own URI.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref: str | None = Field(default=None, alias="$ref")
    asset_type: str | None = Field(default=None, alias="assetType")
    viewing_direction: str | None = Field(default=None, alias="viewingDirection")
    viewing_hint: str | None = Field(default=None, alias="viewingHint")
    see_also: Any = Field(default=None, alias="seeAlso")
    root_section: Section | None = Field(default=None, alias="rootSection")
    assets: list[Asset] = Field(default_factory=list)

    @property
    def is_reference(self) -> bool:
        return self.ref is not None


class Manifestation(BaseModel):
    """
    Node of the legacy manifestation tree.

    ``assetSequence`` is the index of the asset sequence this node presents,
    if any.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = None
    section_type: str | None = Field(default=None, alias="sectionType")
    asset_sequence: int | None = Field(default=None, alias="assetSequence")
    structures: list["Manifestation"] = Field(default_factory=list)


class Package(BaseModel):
    """Legacy package (dialect B document root)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    attribution: str | None = None
    license: str | None = None
    logo: str | None = None
    see_also: Any = Field(default=None, alias="seeAlso")
    root_structure: Manifestation | None = Field(default=None, alias="rootStructure")
    asset_sequences: list[AssetSequence] = Field(
        default_factory=list, alias="assetSequences"
    )


Document = Union[Manifest, Package]

Range.model_rebuild()
Section.model_rebuild()
Manifestation.model_rebuild()
