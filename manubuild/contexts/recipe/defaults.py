"""
Default build recipe and engine configuration.

Engines and the manuscript base name come from the environment (or .env),
falling back to a stock TeX Live toolchain.
"""

import os

from dotenv import load_dotenv

from manubuild.contexts.recipe.artifacts import final_patterns, intermediate_patterns

load_dotenv()

LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
BIBLIOGRAPHY_ENGINE = os.getenv("BIBLIOGRAPHY_ENGINE", "bibtex")
PDF_VIEWER = os.getenv("PDF_VIEWER", "xdg-open")
MANUSCRIPT_BASENAME = os.getenv("MANUSCRIPT_BASENAME", "manuscript")
BUILD_RECIPE_PATH = os.getenv("BUILD_RECIPE_PATH")

# Placeholders a command template may use
TEMPLATE_VARIABLES = {"base", "latex", "bibtex", "viewer"}

# Marker pdflatex writes to the .aux file when the document declares a bibliography
BIBDATA_MARKER = "\\bibdata"

_TYPESET = {"run": ["{latex}", "-interaction=nonstopmode", "-halt-on-error", "{base}.tex"]}

DEFAULT_RECIPE = {
    "engines": {
        "latex": LATEX_COMPILER,
        "bibtex": BIBLIOGRAPHY_ENGINE,
        "viewer": PDF_VIEWER,
    },
    "targets": {
        "paper": {
            "description": "Typeset, resolve the bibliography, typeset twice more, remove intermediates",
            "steps": [
                _TYPESET,
                {
                    "run": ["{bibtex}", "{base}"],
                    "when": {"file": "{base}.aux", "contains": BIBDATA_MARKER},
                },
                _TYPESET,
                _TYPESET,
                {"delete": intermediate_patterns()},
            ],
        },
        "view": {
            "description": "Open the rendered document in a detached viewer",
            "steps": [{"spawn": ["{viewer}", "{base}.pdf"]}],
        },
        "clean": {
            "description": "Remove intermediate files and the rendered document",
            "steps": [{"delete": intermediate_patterns() + final_patterns()}],
        },
    },
}
