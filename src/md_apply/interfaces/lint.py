"""Abstract interface for the external lint/type-check collaborator."""

from typing import Protocol

from ..models.results import LintCounts


class LintRunner(Protocol):
    """Runs an external checker and reports error/warning counts."""

    async def run(self) -> LintCounts | None:
        """
        Run the checker once.

        Implementations never raise: a checker that cannot run, times out
        or produces unusable output yields None ("no lint data").

        Returns:
            Counts parsed from the checker output, or None
        """
        ...
