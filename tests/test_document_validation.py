"""Tests for document validation."""

from pathlib import Path

from quire.document import (
    load_json,
    parse_manifest,
    parse_package,
    validate_document,
    validate_manifest,
    validate_package,
)


FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestManifestValidation:
    """Tests for manifest validation."""

    def test_paged_fixture_issues(self):
        """Test that blank labels and dangling range references are reported."""
        manifest = parse_manifest(load_json(str(FIXTURES_DIR / "manifest_paged.json")))
        issues = validate_manifest(manifest)

        paths = {issue.path for issue in issues}
        assert paths == {
            "sequences[0].canvases[4].label",
            "structures[2].ranges[1]",
            "structures[3].canvases[1]",
        }

    def test_empty_sequences(self):
        """Test empty sequences."""
        manifest = parse_manifest({"@id": "https://example.org/m", "sequences": []})
        issues = validate_manifest(manifest)

        assert len(issues) == 1
        assert issues[0].path == "sequences"

    def test_stub_without_id(self):
        """Test that a stub that cannot be fetched is flagged."""
        manifest = parse_manifest(
            {
                "@id": "https://example.org/m",
                "sequences": [
                    {"canvases": [{"@id": "https://example.org/c/0", "label": "1"}]},
                    {"@type": "sc:Sequence"},
                ],
            }
        )
        issues = validate_manifest(manifest)

        assert [i.path for i in issues] == ["sequences[1]"]

    def test_no_canvases(self):
        """Test no canvases."""
        manifest = parse_manifest(
            {"@id": "https://example.org/m", "sequences": [{"canvases": []}]}
        )
        issues = validate_manifest(manifest)

        assert any("No canvases" in issue.message for issue in issues)


class TestPackageValidation:
    """Tests for package validation."""

    def test_out_of_range_asset_index(self):
        """Test out of range asset index."""
        package = parse_package(load_json(str(FIXTURES_DIR / "package_legacy.json")))
        issues = validate_package(package)

        assert len(issues) == 1
        assert issues[0].path == (
            "assetSequences[0].rootSection.sections[1].sections[0].assets[1]"
        )
        assert "99" in issues[0].message

    def test_manifestation_points_past_sequences(self):
        """Test manifestation points past sequences."""
        package = parse_package(
            {
                "rootStructure": {"name": "root", "structures": [{"assetSequence": 3}]},
                "assetSequences": [
                    {"rootSection": {"assets": [0]}, "assets": [{"orderLabel": "1"}]}
                ],
            }
        )
        issues = validate_package(package)

        assert [i.path for i in issues] == ["rootStructure.structures[0].assetSequence"]

    def test_missing_root_section(self):
        """Test missing root section."""
        package = parse_package({"assetSequences": [{"assets": [{"orderLabel": "1"}]}]})
        issues = validate_document(package)

        assert [i.path for i in issues] == ["assetSequences[0].rootSection"]

    def test_empty_asset_sequences(self):
        """Test empty asset sequences."""
        issues = validate_package(parse_package({"assetSequences": []}))
        assert [i.path for i in issues] == ["assetSequences"]
