"""
Build Recipe

Static table mapping target names to ordered command descriptors. The table is
built once from DEFAULT_RECIPE, optionally merged with a YAML override, and is
read-only afterwards.

Override file format (any subset of the defaults):

    engines:
      latex: lualatex
    targets:
      paper:
        steps:
          - run: ["{latex}", "{base}.tex"]
          - run: ["{bibtex}", "{base}"]
            when: {file: "{base}.aux", contains: "\\bibdata"}
          - delete: ["{base}.aux", "{base}.log"]
      draft:
        description: Single quick pass
        steps:
          - run: ["{latex}", "-draftmode", "{base}.tex"]

Targets are merged by name; a target's step list is replaced as a whole.
"""

import string
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from omegaconf import DictConfig, OmegaConf

from manubuild.contexts.recipe.defaults import (
    BUILD_RECIPE_PATH,
    DEFAULT_RECIPE,
    TEMPLATE_VARIABLES,
)
from manubuild.contexts.recipe.exceptions import RecipeError, UnknownTargetError

ENGINE_NAMES = ("latex", "bibtex", "viewer")


class StepKind(Enum):
    RUN = "run"
    DELETE = "delete"
    SPAWN = "spawn"


@dataclass(frozen=True)
class Step:
    """
    One command descriptor within a target.

    Attributes:
        kind: How the step is executed
        args: Command argv (run/spawn) or glob patterns (delete), as templates
        guard_file: Optional file template; the step only runs when this file
            exists and contains guard_contains
        guard_contains: Marker text looked for in guard_file
    """

    kind: StepKind
    args: Tuple[str, ...]
    guard_file: Optional[str] = None
    guard_contains: Optional[str] = None

    @property
    def is_guarded(self) -> bool:
        return self.guard_file is not None


@dataclass(frozen=True)
class Target:
    name: str
    steps: Tuple[Step, ...]
    description: str = ""


@dataclass(frozen=True)
class Recipe:
    """Read-only target table plus the engine names substituted into templates."""

    targets: Mapping[str, Target]
    engines: Mapping[str, str]

    def get(self, name: str) -> Target:
        if name not in self.targets:
            raise UnknownTargetError(name, self.targets.keys())
        return self.targets[name]

    def names(self) -> List[str]:
        return list(self.targets.keys())

    def variables(self, base_name: str) -> Dict[str, str]:
        """Template substitutions for a build of base_name."""
        return {"base": base_name, **self.engines}


def render_args(step: Step, variables: Mapping[str, str]) -> List[str]:
    """Substitute base name and engine names into a step's templates."""
    return [arg.format(**variables) for arg in step.args]


def render_guard(step: Step, variables: Mapping[str, str]) -> Optional[str]:
    if step.guard_file is None:
        return None
    return step.guard_file.format(**variables)


def _check_placeholders(template: str, target: str, index: int) -> None:
    """Reject templates using placeholders other than TEMPLATE_VARIABLES."""
    try:
        fields = [field for _, field, _, _ in string.Formatter().parse(template) if field is not None]
    except ValueError as e:
        raise RecipeError(f"Malformed template '{template}': {e}", target, index) from e

    for field in fields:
        if field not in TEMPLATE_VARIABLES:
            raise RecipeError(
                f"Unknown placeholder '{{{field}}}' in '{template}'. "
                f"Allowed: {', '.join(sorted(TEMPLATE_VARIABLES))}",
                target,
                index,
            )


def _check_delete_pattern(pattern: str, target: str, index: int) -> None:
    # Deletion never leaves the working directory
    path = PurePosixPath(pattern)
    if path.is_absolute() or ".." in path.parts:
        raise RecipeError(
            f"Delete pattern must be relative to the working directory: '{pattern}'", target, index
        )


def _parse_step(raw: Any, target: str, index: int) -> Step:
    if not isinstance(raw, dict):
        raise RecipeError(f"Step must be a mapping, got {type(raw).__name__}", target, index)

    kinds = [kind for kind in StepKind if kind.value in raw]
    if len(kinds) != 1:
        expected = "/".join(kind.value for kind in StepKind)
        raise RecipeError(f"Step must have exactly one of {expected}", target, index)
    kind = kinds[0]

    unknown = set(raw) - {kind.value, "when"}
    if unknown:
        raise RecipeError(f"Unknown step keys: {sorted(unknown)}", target, index)

    args = raw[kind.value]
    if isinstance(args, str):
        args = [args]
    if not args or not all(isinstance(arg, str) and arg for arg in args):
        raise RecipeError(f"'{kind.value}' needs a non-empty list of strings", target, index)

    for arg in args:
        _check_placeholders(arg, target, index)
        if kind is StepKind.DELETE:
            _check_delete_pattern(arg, target, index)

    guard_file = guard_contains = None
    when = raw.get("when")
    if when is not None:
        if not isinstance(when, dict) or not when.get("file") or not when.get("contains"):
            raise RecipeError("'when' needs both 'file' and 'contains'", target, index)
        guard_file = str(when["file"])
        guard_contains = str(when["contains"])
        _check_placeholders(guard_file, target, index)

    return Step(kind=kind, args=tuple(args), guard_file=guard_file, guard_contains=guard_contains)


def _parse_target(name: str, raw: Any) -> Target:
    if not isinstance(raw, dict):
        raise RecipeError("Target must be a mapping with a 'steps' list", name)

    steps = raw.get("steps")
    if not isinstance(steps, list) or not steps:
        raise RecipeError("Target needs a non-empty 'steps' list", name)

    return Target(
        name=name,
        steps=tuple(_parse_step(step, name, i) for i, step in enumerate(steps)),
        description=str(raw.get("description") or ""),
    )


def recipe_from_dict(data: Dict[str, Any]) -> Recipe:
    """
    Build a validated Recipe from a plain dict.

    Raises:
        RecipeError: If any engine, target or step is malformed
    """
    unknown = set(data) - {"engines", "targets"}
    if unknown:
        raise RecipeError(f"Unknown recipe sections: {sorted(unknown)}")

    engines = data.get("engines") or {}
    for key, value in engines.items():
        if key not in ENGINE_NAMES:
            raise RecipeError(f"Unknown engine '{key}'. Expected one of: {', '.join(ENGINE_NAMES)}")
        if not isinstance(value, str) or not value.strip():
            raise RecipeError(f"Engine '{key}' must be a non-empty command name")
    missing = [name for name in ENGINE_NAMES if name not in engines]
    if missing:
        raise RecipeError(f"Missing engines: {', '.join(missing)}")

    targets = data.get("targets") or {}
    if not targets:
        raise RecipeError("Recipe defines no targets")

    parsed = {str(name): _parse_target(str(name), raw) for name, raw in targets.items()}

    return Recipe(
        targets=MappingProxyType(parsed),
        engines=MappingProxyType({key: engines[key] for key in ENGINE_NAMES}),
    )


def load_recipe(config_path: Optional[Path] = None) -> Recipe:
    """
    Load the build recipe.

    Starts from DEFAULT_RECIPE and merges the YAML override at config_path
    (or BUILD_RECIPE_PATH when set) on top of it.

    Args:
        config_path: Optional path to a YAML recipe override

    Returns:
        Validated, read-only Recipe

    Raises:
        RecipeError: If the merged recipe is malformed or the override is missing
    """
    if config_path is None and BUILD_RECIPE_PATH:
        config_path = Path(BUILD_RECIPE_PATH)

    conf = OmegaConf.create(DEFAULT_RECIPE)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise RecipeError(f"Recipe file not found: {config_path}")
        override = OmegaConf.load(config_path)
        if not isinstance(override, DictConfig):
            raise RecipeError(f"Recipe file must contain a mapping: {config_path}")
        conf = OmegaConf.merge(conf, override)

    return recipe_from_dict(OmegaConf.to_container(conf, resolve=True))
