"""
LaTeX log diagnostics.

Pulls error and warning lines out of a pdflatex .log so a failed build can be
summarised without reading the whole transcript.
"""

import re
from pathlib import Path
from typing import List, Tuple

ERROR_PATTERN = re.compile(r"^! (.+)$", re.MULTILINE)

# File-line-error style errors: "./manuscript.tex:12: Undefined control sequence."
FILE_LINE_ERROR_PATTERN = re.compile(r"^\S+\.tex:\d+: (.+)$", re.MULTILINE)

# Fatal phrases that do not always start with "!"
FATAL_PHRASES = [
    r"Undefined control sequence",
    r"File ended while scanning use of",
    r"Emergency stop",
]

WARNING_PATTERNS = [
    re.compile(r"LaTeX Warning: (.+)"),
    re.compile(r"Package \w+ Warning: (.+)"),
    re.compile(r"Overfull \\hbox \((.+)\)"),
    re.compile(r"Underfull \\hbox \((.+)\)"),
]


def parse_latex_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Parse LaTeX log content for errors and warnings.

    Args:
        log_content: Content of the .log file

    Returns:
        Tuple of (errors, warnings), each in order of appearance without duplicates
    """
    errors = []
    for pattern in (ERROR_PATTERN, FILE_LINE_ERROR_PATTERN):
        for match in pattern.finditer(log_content):
            message = match.group(1).strip()
            if message not in errors:
                errors.append(message)

    for phrase in FATAL_PHRASES:
        match = re.search(rf"({phrase}.*?)$", log_content, re.MULTILINE)
        if match and not any(phrase in err for err in errors):
            errors.append(match.group(1).strip())

    warnings = []
    for pattern in WARNING_PATTERNS:
        for match in pattern.finditer(log_content):
            warnings.append(match.group(1).strip())

    return errors, warnings


def read_log(log_path: Path) -> Tuple[List[str], List[str]]:
    """Parse a log file; a missing log yields no diagnostics."""
    if not log_path.exists():
        return [], []
    # pdflatex writes log files in latin-1 (font metadata is not valid UTF-8)
    return parse_latex_log(log_path.read_text(encoding="latin-1"))
