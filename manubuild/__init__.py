"""
manubuild - reproducible manuscript builds from a small, static target table.

Runs named build targets (paper, view, clean) against a working directory
holding a LaTeX manuscript.

Architecture:
- Recipe Context: static target table, command templates, artifact classes
- Building Context: sequential step execution, quiet cleanup, detached viewer
"""

__version__ = "0.1.0"
