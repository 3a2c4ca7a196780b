"""
Building Context

Responsibilities:
- Runs a target's steps in order, halting at the first failing command
- Quietly deletes intermediate and final artifacts
- Launches the viewer detached from the caller
- Summarises LaTeX errors and warnings from surviving log files

Owns: process execution, artifact deletion, build diagnostics
Never: Edits the manuscript source or the recipe
"""

from manubuild.contexts.building.runner import BuildResult, StepResult, run_target

__all__ = ["BuildResult", "StepResult", "run_target"]
