import re

_TOKEN_PARAM = re.compile(r"(X-Plex-Token=)[^&#]+", re.IGNORECASE)


def redact_token(token: str | None) -> str:
    """
    Redact a token for logging purposes.
    Shows the first 6 characters followed by ***.
    """
    if not token:
        return "None"
    if len(token) <= 6:
        return token
    return f"{token[:6]}***"


def redact_url(url: str) -> str:
    """Mask the X-Plex-Token query parameter of a URL before it is logged."""
    return _TOKEN_PARAM.sub(r"\1***", url)
