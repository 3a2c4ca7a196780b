"""
Shared fixtures.

The engine stand-ins are POSIX shell scripts that mimic what pdflatex and
bibtex do to the working directory, and append each call to calls.txt so
tests can check ordering.
"""

import stat
from pathlib import Path

import pytest
from loguru import logger

from manubuild.contexts.recipe.defaults import DEFAULT_RECIPE
from manubuild.contexts.recipe.recipe import recipe_from_dict

FAKE_LATEX = r"""#!/bin/sh
# last argument is the source file
for src; do :; done
echo "latex $src" >> "{calls}"
if [ ! -f "$src" ]; then
    echo "! I can't find file \`$src'."
    exit 1
fi
stem="${{src%.tex}}"
if grep -q 'undefinedmacro' "$src"; then
    echo "! Undefined control sequence." > "$stem.log"
    echo "LaTeX Warning: Reference \`sec:x' undefined." >> "$stem.log"
    echo "! Undefined control sequence."
    exit 1
fi
printf '%s\n' '\relax' > "$stem.aux"
if grep -q 'bibliography' "$src"; then
    printf '%s\n' '\bibdata{{refs}}' >> "$stem.aux"
fi
echo "This is fake pdfTeX" > "$stem.log"
printf '%s\n' '\contentsline' > "$stem.toc"
cp "$src" "$stem.pdf"
"""

FAKE_BIBTEX = r"""#!/bin/sh
echo "bibtex $1" >> "{calls}"
if [ ! -f "$1.aux" ]; then
    echo "I couldn't open file name \`$1.aux'"
    exit 2
fi
if [ -f refs.broken ]; then
    echo "I couldn't open database file refs.bib" >&2
    exit 2
fi
printf '%s\n' '\begin{{thebibliography}}' > "$1.bbl"
echo "bibtex log" > "$1.blg"
"""

VALID_SOURCE = r"""\documentclass{article}
\begin{document}
Hello World
\end{document}
"""

CITING_SOURCE = r"""\documentclass{article}
\begin{document}
As shown before \cite{knuth}.
\bibliographystyle{plain}
\bibliography{refs}
\end{document}
"""

BROKEN_SOURCE = r"""\documentclass{article}
\begin{document}
\undefinedmacro
\end{document}
"""


def _write_script(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks added during a test so later tests never write to closed streams."""
    yield
    logger.remove()


@pytest.fixture
def engines_dir(tmp_path):
    """Directory holding fake engines and their call log."""
    directory = tmp_path / "engines"
    directory.mkdir()
    calls = directory / "calls.txt"
    _write_script(directory / "fake-latex", FAKE_LATEX.format(calls=calls))
    _write_script(directory / "fake-bibtex", FAKE_BIBTEX.format(calls=calls))
    return directory


@pytest.fixture
def fake_recipe(engines_dir):
    """Default targets wired to the fake engines."""
    data = {
        **DEFAULT_RECIPE,
        "engines": {
            "latex": str(engines_dir / "fake-latex"),
            "bibtex": str(engines_dir / "fake-bibtex"),
            "viewer": "true",
        },
    }
    return recipe_from_dict(data)


@pytest.fixture
def calls(engines_dir):
    """Read the engine calls recorded so far."""

    def _read():
        log = engines_dir / "calls.txt"
        if not log.exists():
            return []
        return [line.split()[0] for line in log.read_text().splitlines()]

    return _read


@pytest.fixture
def work_dir(tmp_path):
    directory = tmp_path / "paper"
    directory.mkdir()
    return directory
