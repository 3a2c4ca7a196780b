"""
Artifact classification for manuscript builds.

Every file a build touches is one of:
- source: the markup the author edits, never deleted
- intermediate: produced mid-build, removed by the paper and clean targets
- final: the rendered document, removed only by clean
"""

import glob
from enum import Enum
from pathlib import Path
from typing import List, Optional

SOURCE_SUFFIX = ".tex"
FINAL_SUFFIX = ".pdf"

# Cross-reference, bibliography, log and listing files written by pdflatex/bibtex
INTERMEDIATE_SUFFIXES = [".aux", ".bbl", ".blg", ".log", ".lof", ".lot", ".out", ".toc"]


class ArtifactKind(Enum):
    SOURCE = "source"
    INTERMEDIATE = "intermediate"
    FINAL = "final"


def classify(path: Path, base_name: str) -> Optional[ArtifactKind]:
    """
    Classify a file belonging to the manuscript named base_name.

    Returns None for files that do not share the base name or whose suffix is
    not one the build knows about.
    """
    path = Path(path)
    if path.stem != base_name:
        return None

    suffix = path.suffix
    if suffix == SOURCE_SUFFIX:
        return ArtifactKind.SOURCE
    if suffix == FINAL_SUFFIX:
        return ArtifactKind.FINAL
    if suffix in INTERMEDIATE_SUFFIXES:
        return ArtifactKind.INTERMEDIATE
    return None


def check_base_name(base_name: str) -> None:
    """
    Reject base names that would reach outside the working directory.

    Raises:
        ValueError: If base_name is empty, contains a path separator or is "." or ".."
    """
    if not base_name or base_name in (".", ".."):
        raise ValueError(f"Invalid manuscript base name: '{base_name}'")
    if "/" in base_name or "\\" in base_name:
        raise ValueError(f"Manuscript base name must not contain a path separator: '{base_name}'")


def existing_artifacts(work_dir: Path, base_name: str, kind: ArtifactKind) -> List[Path]:
    """List files of the given kind currently present in work_dir."""
    found = []
    for path in sorted(Path(work_dir).glob(f"{glob.escape(base_name)}.*")):
        if path.is_file() and classify(path, base_name) is kind:
            found.append(path)
    return found


def intermediate_patterns(base: str = "{base}") -> List[str]:
    """Delete patterns for intermediate files, templated on the base name."""
    return [f"{base}{suffix}" for suffix in INTERMEDIATE_SUFFIXES]


def final_patterns(base: str = "{base}") -> List[str]:
    """Delete patterns for the rendered document."""
    return [f"{base}{FINAL_SUFFIX}"]
