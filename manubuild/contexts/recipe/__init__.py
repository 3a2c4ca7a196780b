"""
Recipe Context

Responsibilities:
- Defines the static target table (paper, view, clean and any overrides)
- Validates command templates and delete patterns
- Classifies artifact files as source, intermediate or final

Owns: target definitions, template substitution, artifact classes
Never: Executes commands or touches the filesystem beyond reading overrides
"""

from manubuild.contexts.recipe.artifacts import ArtifactKind, classify, existing_artifacts
from manubuild.contexts.recipe.defaults import MANUSCRIPT_BASENAME
from manubuild.contexts.recipe.exceptions import RecipeError, UnknownTargetError
from manubuild.contexts.recipe.recipe import (
    Recipe,
    Step,
    StepKind,
    Target,
    load_recipe,
    render_args,
    render_guard,
)

__all__ = [
    "ArtifactKind",
    "MANUSCRIPT_BASENAME",
    "Recipe",
    "RecipeError",
    "Step",
    "StepKind",
    "Target",
    "UnknownTargetError",
    "classify",
    "existing_artifacts",
    "load_recipe",
    "render_args",
    "render_guard",
]
