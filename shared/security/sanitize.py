import bleach


def sanitize_text(value: str | None) -> str:
    """Strips every tag from free text before it is persisted."""
    if not value:
        return ""
    return bleach.clean(value, tags=[], attributes={}, strip=True).strip()
