"""Tests for document Pydantic models."""

from pathlib import Path

from quire.document import (
    AssetSequence,
    ImageService,
    Manifest,
    Package,
    Sequence,
    label_text,
    load_json,
    parse_manifest,
    parse_package,
)


FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestLabelText:
    """Tests for label_text()."""

    def test_plain_string(self):
        """Test plain string."""
        assert label_text("Folio 1r") == "Folio 1r"

    def test_value_object_list(self):
        """Test JSON-LD value objects inside a list."""
        assert label_text([{"@value": "Folio 1r", "@language": "en"}]) == "Folio 1r"

    def test_language_map(self):
        """Test language map."""
        assert label_text({"en": ["Cover"]}) == "Cover"

    def test_none_and_empty(self):
        """Test none and empty."""
        assert label_text(None) is None
        assert label_text([]) is None


class TestImageService:
    """Tests for ImageService model."""

    def test_image_url_default_params(self):
        """Test IIIF Image API URL generation with defaults."""
        service = ImageService(id="https://iiif.example.org/image1")
        assert service.image_url() == "https://iiif.example.org/image1/full/full/0/default.jpg"

    def test_image_url_strips_trailing_slash(self):
        """Test that trailing slash in service ID is handled correctly."""
        service = ImageService(id="https://iiif.example.org/image1/")
        url = service.image_url(size="100,150")
        assert url == "https://iiif.example.org/image1/full/100,150/0/default.jpg"


class TestManifest:
    """Tests for the dialect A models."""

    def test_parse_paged_manifest(self):
        """Test parsing the paged fixture."""
        manifest = parse_manifest(load_json(str(FIXTURES_DIR / "manifest_paged.json")))

        assert isinstance(manifest, Manifest)
        assert manifest.label_text() == "Book of Hours"
        assert len(manifest.sequences) == 1
        assert len(manifest.structures) == 4

    def test_sequence_fields_use_aliases(self):
        """Test sequence fields use aliases."""
        manifest = parse_manifest(load_json(str(FIXTURES_DIR / "manifest_paged.json")))
        sequence = manifest.sequences[0]

        assert sequence.viewing_hint == "paged"
        assert sequence.start_canvas == "https://example.org/iiif/book1/canvas/c2"
        assert sequence.viewing_direction is None

    def test_range_references_stay_strings(self):
        """Test that range members are kept as raw references."""
        manifest = parse_manifest(load_json(str(FIXTURES_DIR / "manifest_paged.json")))
        top = manifest.structures[0]

        assert top.viewing_hint == "top"
        assert top.ranges == [
            "https://example.org/iiif/book1/range/r1",
            "https://example.org/iiif/book1/range/r2",
        ]

    def test_canvas_image_url(self):
        """Test canvas image url."""
        manifest = parse_manifest(load_json(str(FIXTURES_DIR / "manifest_paged.json")))
        canvases = manifest.sequences[0].canvases

        assert canvases[0].image_url(size="50,") == (
            "https://iiif.example.org/book1-c0/full/50,/0/default.jpg"
        )
        assert canvases[1].image_url() is None

    def test_sequence_without_canvases_is_reference(self):
        """Test that a sequence lacking canvases is a stub."""
        stub = Sequence.model_validate({"@id": "https://example.org/seq/1"})
        inline = Sequence.model_validate({"@id": "https://example.org/seq/0", "canvases": []})

        assert stub.is_reference
        assert not inline.is_reference

    def test_unknown_fields_are_kept(self):
        """Test unknown fields are kept."""
        manifest = Manifest.model_validate(
            {"@id": "https://example.org/m", "sequences": [], "within": "collection"}
        )
        assert manifest.model_extra["within"] == "collection"


class TestPackage:
    """Tests for the dialect B models."""

    def test_parse_legacy_package(self):
        """Test parse legacy package."""
        package = parse_package(load_json(str(FIXTURES_DIR / "package_legacy.json")))

        assert isinstance(package, Package)
        assert package.root_structure.name == "Collected works"
        assert [s.asset_sequence for s in package.root_structure.structures] == [0, 1]
        assert package.see_also == {"tag": "OpenExternal", "data": "catalogue/b123.pdf"}

    def test_asset_sequence_fields(self):
        """Test asset sequence fields."""
        package = parse_package(load_json(str(FIXTURES_DIR / "package_legacy.json")))
        sequence = package.asset_sequences[0]

        assert sequence.asset_type == "seadragon/dzi"
        assert sequence.root_section.section_type == "Monograph"
        assert sequence.root_section.sections[1].sections[0].assets == [2, 99]
        assert sequence.assets[0].order_label == "Cover"
        assert sequence.assets[1].media_uri == "v1/1.jpg"

    def test_ref_marks_reference(self):
        """Test that a $ref sequence is a stub."""
        package = parse_package(load_json(str(FIXTURES_DIR / "package_legacy.json")))

        assert package.asset_sequences[1].is_reference
        assert package.asset_sequences[1].ref == "sequence-1.json"
        assert not AssetSequence().is_reference
