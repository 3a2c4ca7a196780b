"""Unit tests for LaTeX log diagnostics."""

import pytest

from manubuild.contexts.building.log_parser import parse_latex_log, read_log

FAILED_LOG = r"""This is pdfTeX, Version 3.141592653
(./manuscript.tex
LaTeX2e <2023-11-01>
./manuscript.tex:4: Undefined control sequence.
l.4 \undefinedmacro
! Undefined control sequence.
l.4 \undefinedmacro
LaTeX Warning: Citation `knuth' on page 1 undefined on input line 5.
Overfull \hbox (12.3pt too wide) in paragraph at lines 7--8
! Emergency stop.
"""


@pytest.mark.unit
def test_parse_errors_in_order_without_duplicates():
    errors, _ = parse_latex_log(FAILED_LOG)

    assert errors[0] == "Undefined control sequence."
    assert "Emergency stop." in errors
    assert errors.count("Undefined control sequence.") == 1


@pytest.mark.unit
def test_parse_warnings():
    _, warnings = parse_latex_log(FAILED_LOG)

    assert "Citation `knuth' on page 1 undefined on input line 5." in warnings
    assert "12.3pt too wide" in warnings


@pytest.mark.unit
def test_clean_log_has_no_diagnostics():
    errors, warnings = parse_latex_log("This is pdfTeX\nOutput written on manuscript.pdf (1 page).\n")

    assert errors == []
    assert warnings == []


@pytest.mark.unit
def test_read_log_missing_file(tmp_path):
    assert read_log(tmp_path / "manuscript.log") == ([], [])


@pytest.mark.unit
def test_read_log_latin1(tmp_path):
    log = tmp_path / "manuscript.log"
    log.write_bytes("! Missing $ inserted.\nFont \xe9\n".encode("latin-1"))

    errors, _ = read_log(log)

    assert errors == ["Missing $ inserted."]
