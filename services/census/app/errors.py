"""Problem details raised by the census HTTP layer."""

from __future__ import annotations

from fastapi import status

from shared.http.errors import PROBLEM_BASE_URI, ProblemDetailsException

__all__ = ["UnknownColumnError", "UnknownProfileError"]


class UnknownColumnError(ProblemDetailsException):
    """Raised when a request names a column the active profile does not show."""

    default_status_code = status.HTTP_400_BAD_REQUEST
    default_title = "Unknown Column"
    default_type = f"{PROBLEM_BASE_URI}/unknown-column"

    def __init__(self, column: str, *, profile: str) -> None:
        self.column = column
        self.profile = profile
        super().__init__(
            detail=f"Column '{column}' is not part of the '{profile}' report.",
            extensions={"column": column, "profile": profile},
        )


class UnknownProfileError(ProblemDetailsException):
    """Raised when the configured report profile or room shape does not exist."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_title = "Unknown Report Profile"
    default_type = f"{PROBLEM_BASE_URI}/unknown-profile"

    def __init__(self, name: str, *, detail: str | None = None) -> None:
        self.name = name
        super().__init__(
            detail=detail or f"Report profile '{name}' is not configured.",
            extensions={"profileName": name},
        )
