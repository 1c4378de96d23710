"""
Display verbosity.

Controls how many arguments of a process are shown when it is printed.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Verbosity:
    """
    Display-truncation setting.

    ``max_args is None`` means verbose (show every argument); otherwise at
    most ``max_args`` arguments are shown.
    """

    max_args: Optional[int] = None

    def __post_init__(self):
        """Validate verbosity."""
        if self.max_args is not None and self.max_args < 0:
            raise ValueError(f"max_args must be non-negative, got {self.max_args}")

    @classmethod
    def verbose(cls) -> 'Verbosity':
        """Show all arguments."""
        return cls(max_args=None)

    @classmethod
    def brief(cls, max_args: int) -> 'Verbosity':
        """Show at most ``max_args`` arguments."""
        return cls(max_args=max_args)

    @property
    def is_verbose(self) -> bool:
        return self.max_args is None

    def __str__(self) -> str:
        return "Verbose" if self.is_verbose else f"Brief({self.max_args})"


def verbose_if(verbose: bool, max_args: int) -> Verbosity:
    """
    Select a verbosity from a flag.

    Args:
        verbose: Whether all arguments should be shown
        max_args: Argument cap used when ``verbose`` is false

    Returns:
        ``Verbosity.verbose()`` if ``verbose`` else ``Verbosity.brief(max_args)``
    """
    if verbose:
        return Verbosity.verbose()
    return Verbosity.brief(max_args)
