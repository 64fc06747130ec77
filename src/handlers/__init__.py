"""Handlers package - Telegram admin console feature plugins."""

from src.models.results import ErrorKind, OperationResult


def format_error_message(emoji: str, problem: str, action: str) -> str:
    """
    Format error messages following the pattern: [emoji] [problem] [action].

    Args:
        emoji: Visual indicator (e.g., "❌", "⚠️", "🔒")
        problem: Clear description of what went wrong
        action: Suggested next step for the user

    Returns:
        Formatted error message string

    Example:
        >>> format_error_message("❌", "Business not found.", "Check the ID and try again.")
        "❌ Business not found.\n\nCheck the ID and try again."
    """
    return f"{emoji} {problem}\n\n{action}"


# Common error templates
ERROR_TEMPLATES = {
    "permission_denied": lambda: format_error_message(
        "🔒",
        "This command is only available to admins.",
        "Make sure you're using the correct account."
    ),
    "rate_limit": lambda seconds: format_error_message(
        "⏱️",
        "Too many requests.",
        f"Please wait {seconds} seconds before trying again."
    ),
    "business_not_found": lambda: format_error_message(
        "❌",
        "Business not found.",
        "Check the business ID and try again."
    ),
    "request_not_found": lambda: format_error_message(
        "❌",
        "Verification request not found.",
        "Use /pending to see open requests."
    ),
    "already_reviewed": lambda status: format_error_message(
        "⚠️",
        f"This request was already {status}.",
        "Use /pending to see open requests."
    ),
    "no_matches": lambda: format_error_message(
        "🔍",
        "No matching places found.",
        "Tap Retry or try again later."
    ),
    "service_unavailable": lambda: format_error_message(
        "⚠️",
        "The service is temporarily unavailable.",
        "Please try again in a moment."
    ),
    "invalid_input": lambda field, requirement: format_error_message(
        "❌",
        f"Invalid {field}.",
        f"{requirement}. Please try again."
    ),
}


_KIND_EMOJI = {
    ErrorKind.VALIDATION: "❌",
    ErrorKind.AUTHORIZATION: "🔒",
    ErrorKind.NOT_FOUND: "❌",
    ErrorKind.CONFLICT: "⚠️",
    ErrorKind.UPSTREAM_UNAVAILABLE: "⚠️",
    ErrorKind.UPSTREAM_TIMEOUT: "⏱️",
}


def format_result_error(result: OperationResult) -> str:
    """User-facing text for a failed operation result."""
    emoji = _KIND_EMOJI.get(result.error, "❌")
    action = "Please try again." if result.retryable else "Nothing was changed."
    return format_error_message(emoji, result.message, action)
