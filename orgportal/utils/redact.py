def mask_token(token) -> str:
    """Short, non-replayable form of a bearer token for log lines."""
    if not token:
        return "<none>"
    if len(token) <= 12:
        return "***"
    return f"{token[:8]}...{token[-4:]}"


def mask_email(email) -> str:
    if not email or "@" not in email:
        return "<invalid>"
    local, domain = email.split("@", 1)
    return f"{local[:1]}***@{domain}"
