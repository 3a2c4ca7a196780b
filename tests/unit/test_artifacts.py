"""Unit tests for artifact classification."""

from pathlib import Path

import pytest

from manubuild.contexts.recipe.artifacts import (
    INTERMEDIATE_SUFFIXES,
    ArtifactKind,
    check_base_name,
    classify,
    existing_artifacts,
    final_patterns,
    intermediate_patterns,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "filename, expected",
    [
        ("manuscript.tex", ArtifactKind.SOURCE),
        ("manuscript.pdf", ArtifactKind.FINAL),
        ("manuscript.aux", ArtifactKind.INTERMEDIATE),
        ("manuscript.log", ArtifactKind.INTERMEDIATE),
        ("manuscript.toc", ArtifactKind.INTERMEDIATE),
        ("manuscript.bbl", ArtifactKind.INTERMEDIATE),
        ("manuscript.bib", None),
        ("other.aux", None),
    ],
)
def test_classify(filename, expected):
    assert classify(Path(filename), "manuscript") is expected


@pytest.mark.unit
def test_existing_artifacts_by_kind(tmp_path):
    for name in ["manuscript.tex", "manuscript.aux", "manuscript.log", "manuscript.pdf", "refs.bib"]:
        (tmp_path / name).write_text("x")

    intermediates = existing_artifacts(tmp_path, "manuscript", ArtifactKind.INTERMEDIATE)
    finals = existing_artifacts(tmp_path, "manuscript", ArtifactKind.FINAL)
    sources = existing_artifacts(tmp_path, "manuscript", ArtifactKind.SOURCE)

    assert [p.name for p in intermediates] == ["manuscript.aux", "manuscript.log"]
    assert [p.name for p in finals] == ["manuscript.pdf"]
    assert [p.name for p in sources] == ["manuscript.tex"]


@pytest.mark.unit
def test_patterns_cover_every_intermediate_suffix():
    patterns = intermediate_patterns("ms")

    assert patterns == [f"ms{suffix}" for suffix in INTERMEDIATE_SUFFIXES]
    assert final_patterns("ms") == ["ms.pdf"]
    assert intermediate_patterns()[0].startswith("{base}")


@pytest.mark.unit
def test_existing_artifacts_matches_glob_characters_literally(tmp_path):
    for name in ["draft[v2].aux", "draftv.aux", "draft2.aux"]:
        (tmp_path / name).write_text("x")

    found = existing_artifacts(tmp_path, "draft[v2]", ArtifactKind.INTERMEDIATE)

    assert [p.name for p in found] == ["draft[v2].aux"]


@pytest.mark.unit
@pytest.mark.parametrize("base_name", ["manuscript", "draft[v2]", "my paper", "v1.2"])
def test_check_base_name_accepts_plain_names(base_name):
    check_base_name(base_name)


@pytest.mark.unit
@pytest.mark.parametrize("base_name", ["", ".", "..", "../manuscript", "docs/manuscript", "docs\\manuscript"])
def test_check_base_name_rejects_paths(base_name):
    with pytest.raises(ValueError, match="base name"):
        check_base_name(base_name)
