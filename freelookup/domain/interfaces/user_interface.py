"""Interface for interacting with the user (output only).

Defines the contract for displaying lookup results, errors, warnings and
informational messages, allowing different UI implementations.
"""

import abc
from typing import Any, Dict, List, Sequence


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The text to display (may contain Markdown).
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting (e.g., hint).
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_table(self, rows: Sequence[Dict[str, Any]], title: str = "", **kwargs: Any) -> None:
        """Displays a list of records as a table.

        Args:
            rows: Records sharing (roughly) the same keys; the first row's keys
                define the column order.
            title: Optional table title.
        """
        pass

    def display_attempts(self, attempts: List[Any], **kwargs: Any) -> None:
        """Displays per-provider attempt records (verbose mode).

        Args:
            attempts: AttemptRecord objects from a rotation.
        """
        pass
