"""
Validation for documents of both dialects.

These validators report what the navigation engine will have to repair or
ignore (dangling references, unresolved stubs, empty sequences). The engine
itself tolerates all of these, so validation is advisory and never raises.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import Document, Manifest, Package, Range, Section, Manifestation


@dataclass(frozen=True)
class ValidationIssue:
    """
    Represents a validation problem.

    Attributes:
        path: JSON path to the problematic field (e.g., "sequences[0].canvases[2]")
        message: Human-readable description of the issue
    """

    path: str
    message: str


def validate_manifest(manifest: Manifest) -> list[ValidationIssue]:
    """
    Validate a dialect A manifest.

    Checks that the manifest has:
    - At least one sequence, each inline or resolvable by @id
    - At least one canvas
    - A label on each canvas
    - Range references to canvases and child ranges that resolve

    Parameters:
        manifest: Manifest to validate

    Returns:
        List of validation issues (empty if valid)

    Example:
        >>> issues = validate_manifest(parse_manifest(data))
        >>> for issue in issues:
        ...     print(f"{issue.path}: {issue.message}")
    """
    issues: list[ValidationIssue] = []

    if not manifest.sequences:
        issues.append(ValidationIssue("sequences", "Missing or empty sequences[]."))
        return issues

    canvas_ids: set[str] = set()
    canvas_count = 0
    for seq_i, seq in enumerate(manifest.sequences):
        if seq.is_reference:
            if not seq.id:
                issues.append(
                    ValidationIssue(f"sequences[{seq_i}]", "Sequence reference without @id.")
                )
            continue

        for c_i, canvas in enumerate(seq.canvases or []):
            canvas_count += 1
            canvas_ids.add(canvas.id)
            if not canvas.label_text():
                issues.append(
                    ValidationIssue(
                        f"sequences[{seq_i}].canvases[{c_i}].label",
                        "Canvas missing label.",
                    )
                )

    if canvas_count == 0:
        issues.append(ValidationIssue("sequences[*].canvases", "No canvases found."))

    range_ids = {r.id for r in manifest.structures if r.id}
    for r_i, rng in enumerate(manifest.structures):
        issues.extend(_validate_range(rng, f"structures[{r_i}]", canvas_ids, range_ids))

    return issues


def _validate_range(
    rng: Range, path: str, canvas_ids: set[str], range_ids: set[str]
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    for c_i, ref in enumerate(rng.canvases):
        if isinstance(ref, str) and canvas_ids and ref not in canvas_ids:
            issues.append(
                ValidationIssue(f"{path}.canvases[{c_i}]", f"Unknown canvas {ref}.")
            )

    for k, child in enumerate(rng.ranges):
        if isinstance(child, str):
            if child not in range_ids:
                issues.append(
                    ValidationIssue(f"{path}.ranges[{k}]", f"Unknown range {child}.")
                )
            continue
        issues.extend(_validate_range(child, f"{path}.ranges[{k}]", canvas_ids, range_ids))

    return issues


def validate_package(package: Package) -> list[ValidationIssue]:
    """
    Validate a dialect B package.

    Checks that the package has at least one asset sequence with assets,
    that section asset indices are in range, and that manifestation nodes
    point at existing sequences.
    """
    issues: list[ValidationIssue] = []

    if not package.asset_sequences:
        issues.append(
            ValidationIssue("assetSequences", "Missing or empty assetSequences[].")
        )
        return issues

    asset_count = 0
    for seq_i, seq in enumerate(package.asset_sequences):
        if seq.is_reference:
            continue

        asset_count += len(seq.assets)
        if seq.root_section is None:
            issues.append(
                ValidationIssue(
                    f"assetSequences[{seq_i}].rootSection", "Missing rootSection."
                )
            )
            continue

        issues.extend(
            _validate_section(
                seq.root_section,
                f"assetSequences[{seq_i}].rootSection",
                len(seq.assets),
            )
        )

    if asset_count == 0:
        issues.append(ValidationIssue("assetSequences[*].assets", "No assets found."))

    if package.root_structure is not None:
        issues.extend(
            _validate_manifestation(
                package.root_structure, "rootStructure", len(package.asset_sequences)
            )
        )

    return issues


def _validate_section(section: Section, path: str, total: int) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    for a_i, index in enumerate(section.assets):
        if not 0 <= index < total:
            issues.append(
                ValidationIssue(
                    f"{path}.assets[{a_i}]", f"Asset index {index} out of range."
                )
            )

    for s_i, child in enumerate(section.sections):
        issues.extend(_validate_section(child, f"{path}.sections[{s_i}]", total))

    return issues


def _validate_manifestation(
    node: Manifestation, path: str, total: int
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    if node.asset_sequence is not None and not 0 <= node.asset_sequence < total:
        issues.append(
            ValidationIssue(
                f"{path}.assetSequence",
                f"Sequence index {node.asset_sequence} out of range.",
            )
        )

    for s_i, child in enumerate(node.structures):
        issues.extend(_validate_manifestation(child, f"{path}.structures[{s_i}]", total))

    return issues


def validate_document(document: Document) -> list[ValidationIssue]:
    """Validate a document of either dialect."""
    if isinstance(document, Manifest):
        return validate_manifest(document)
    return validate_package(document)
