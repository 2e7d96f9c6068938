"""Tests for the legacy package provider."""

from pathlib import Path
import json

from quire.document import load_document, parse_document
from quire.navigation import (
    LegacyProvider,
    ProviderContext,
    Settings,
    create_provider,
)


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def package_data() -> dict:
    return json.loads((FIXTURES_DIR / "package_legacy.json").read_text(encoding="utf-8"))


def legacy_provider(**kwargs) -> LegacyProvider:
    return create_provider(parse_document(package_data()), **kwargs)


class TestLoad:
    """Tests for loading a package."""

    def test_create_provider_picks_legacy(self):
        """Test create provider picks legacy."""
        provider = legacy_provider()

        assert isinstance(provider, LegacyProvider)
        assert provider.get_total_canvases() == 4

    def test_other_stubs_become_placeholders(self):
        """Test other stubs become placeholders."""
        provider = legacy_provider()

        assert provider.is_multi_sequence()
        assert not provider.sequences[1].is_reference
        assert provider.sequences[1].assets == []

    def test_second_volume_from_disk(self):
        """Test that the referenced volume is loaded and becomes active."""
        document = load_document(str(FIXTURES_DIR / "package_legacy.json"), sequence_index=1)
        provider = create_provider(document, context=ProviderContext(sequence_index=1))

        assert provider.get_total_canvases() == 2
        assert provider.get_title() == "Collected works, volume 2"
        selected = provider.get_tree().find(lambda n: n.selected)
        assert selected.label == "Volume 2"


class TestLabels:
    """Tests for legacy label rules."""

    def test_canvas_index_by_label(self):
        """Test canvas index by label."""
        provider = legacy_provider()

        assert provider.get_canvas_index_by_label("1") == 1
        assert provider.get_canvas_index_by_label("2") == 2
        assert provider.get_canvas_index_by_label("2 3") == 2
        assert provider.get_canvas_index_by_label("23") == -1

    def test_last_canvas_label(self):
        """Test that trailing labels without digits are skipped."""
        provider = legacy_provider()
        assert provider.get_last_canvas_label() == "2-3"


class TestStructures:
    """Tests for sections and the manifestation tree."""

    def test_deepest_section(self):
        """Test deepest section."""
        provider = legacy_provider()

        assert provider.get_structure_by_canvas_index(2).path == "/1/0"
        assert provider.get_structure_by_canvas_index(0).path == "/0"

    def test_structure_index(self):
        """Test structure index."""
        provider = legacy_provider()

        assert provider.get_structure_index("/1") == 1
        assert provider.get_structure_index("/1/0") == 2

    def test_tree_hangs_sections_under_active_manifestation(self):
        """Test tree hangs sections under active manifestation."""
        provider = legacy_provider()
        tree = provider.get_tree()

        assert tree.label == "Collected works"
        assert tree.type == "manifest"
        volume1, volume2 = tree.nodes
        assert volume1.selected and volume1.expanded
        assert not volume2.selected
        assert [n.label for n in volume1.nodes] == ["CoverFrontOutside", "Chapter"]
        assert [n.label for n in volume1.nodes[1].nodes] == ["Plate"]
        assert volume2.nodes == []

    def test_tree_uses_section_mappings(self):
        """Test tree uses section mappings."""
        provider = legacy_provider(settings=Settings(sectionMappings={"Chapter": "Chapitre"}))
        labels = [n.label for n in provider.get_tree().iter_nodes()]

        assert "Chapitre" in labels
        assert "Chapter" not in labels

    def test_tree_without_manifestations(self):
        """Test tree without manifestations."""
        data = package_data()
        del data["rootStructure"]
        provider = create_provider(parse_document(data))
        tree = provider.get_tree()

        assert tree.label == "root"
        assert tree.type == "manifest"
        assert tree.data is provider.get_root_structure()
        assert [n.label for n in tree.nodes] == ["CoverFrontOutside", "Chapter"]


class TestProperties:
    """Tests for package properties and URIs."""

    def test_title_and_types(self):
        """Test title and types."""
        provider = legacy_provider()

        assert provider.get_title() == "Collected works, volume 1"
        assert provider.get_manifest_type() == "monograph"
        assert provider.get_sequence_type() == "seadragon-dzi"
        # multi-volume monographs open on the viewer, not the thumbnails
        assert not provider.default_to_thumbs_view()

    def test_not_paged_without_hint(self):
        """Test not paged without hint."""
        provider = legacy_provider()
        assert not provider.is_paged()
        assert provider.get_next_page_index(1) == 2

    def test_see_also(self):
        """Test see also."""
        provider = legacy_provider(settings=Settings(mediaBaseUri="https://media.example.org/"))

        assert provider.get_see_also() == "https://example.org/legacy/v1/marc.xml"
        assert provider.get_manifest_see_also_uri() == (
            "https://media.example.org/catalogue/b123.pdf"
        )

    def test_media_and_image_uris(self):
        """Test media and image URIs."""
        settings = Settings(
            mediaBaseUri="https://media.example.org/",
            dziBaseUri="https://dzi.example.org/",
        )
        provider = legacy_provider(settings=settings)

        canvas = provider.get_canvas_by_index(1)
        assert provider.get_canvas_media_uri(canvas) == "https://media.example.org/v1/1.jpg"
        assert provider.get_image_uri(canvas) == "https://dzi.example.org/v1/1.dzi"
        assert provider.get_image_uri(canvas, dzi_uri_template="{0}tiles/{1}") == (
            "https://dzi.example.org/tiles/v1/1.dzi"
        )

    def test_thumbs_have_no_uri(self):
        """Test thumbs have no URI."""
        provider = legacy_provider()
        thumbs = provider.get_thumbs(100, 100)

        assert [t.uri for t in thumbs] == ["", "", "", ""]
        assert thumbs[0].height == 150

    def test_root_properties(self):
        """Test root properties."""
        provider = legacy_provider()

        assert provider.get_attribution() == "Wellcome Library"
        assert provider.get_license() == "CC-BY-NC"
        assert provider.get_metadata() is None


class TestReload:
    """Tests for reloading a package."""

    def test_reload_resolves_active_ref(self):
        """Test that a reload of volume 2 fetches the package and its sequence."""
        requested = []

        def fetch(uri):
            requested.append(uri)
            if uri.startswith("https://example.org/legacy/package.json"):
                return package_data()
            return json.loads((FIXTURES_DIR / "sequence-1.json").read_text(encoding="utf-8"))

        document = load_document(str(FIXTURES_DIR / "package_legacy.json"), sequence_index=1)
        context = ProviderContext(
            data_uri="https://example.org/legacy/package.json",
            sequence_index=1,
            fetch=fetch,
            clock=lambda: 42,
        )
        provider = create_provider(document, context=context)
        results = []

        provider.reload(results.append)

        assert results == [True]
        assert requested == [
            "https://example.org/legacy/package.json?t=42",
            "https://example.org/legacy/sequence-1.json",
        ]
        assert provider.get_total_canvases() == 2
