"""Resolution of the continuation token for the email-verification screen."""

from typing import Optional


def _clean(candidate: Optional[str]) -> Optional[str]:
    if candidate is None:
        return None
    candidate = candidate.strip()
    return candidate or None


def resolve_continuation_token(
    path_token: Optional[str],
    query_token: Optional[str],
    stored_token: Optional[str],
) -> Optional[str]:
    """Return the first usable token, or None when nothing resolves.

    Precedence is the URL path segment, then the `?token=` query parameter,
    then the value stored in the visitor session by the sign-up step. Blank
    candidates count as absent.
    """

    for candidate in (path_token, query_token, stored_token):
        token = _clean(candidate)
        if token:
            return token
    return None
