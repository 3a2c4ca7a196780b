"""Custom exceptions for the recipe context."""

from typing import Iterable, Optional


class RecipeError(ValueError):
    """
    Exception raised when a build recipe is malformed.

    Attributes:
        message: Error description
        target: Name of the target holding the bad step
        step_index: Zero-based position of the bad step within the target
    """

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        step_index: Optional[int] = None,
    ):
        self.message = message
        self.target = target
        self.step_index = step_index

        parts = [message]
        if target is not None:
            location = f"target '{target}'"
            if step_index is not None:
                location += f", step {step_index + 1}"
            parts.append(f"({location})")

        super().__init__(" ".join(parts))


class UnknownTargetError(ValueError):
    """Exception raised when a target name is not in the recipe."""

    def __init__(self, name: str, available: Iterable[str]):
        self.name = name
        self.available = sorted(available)
        super().__init__(f"Unknown target '{name}'. Available targets: {', '.join(self.available)}")
