from __future__ import annotations

from hashdrop.core.debug_support import log_exception_with_id


def format_error_message(user_message: str, exc: BaseException, *, area: str = "GEN") -> str:
    """Log `exc` and build the body of a user-facing error dialog.

    The exception goes to the log only; the user sees the generic message plus
    an error code to look up in the log.
    """
    err_id = log_exception_with_id(area, exc)
    return f"{user_message}\n\nError code: {err_id}"
