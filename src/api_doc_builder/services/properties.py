"""Locale-aware resolution of documentation texts."""


class PropertyResolver:
    """Looks texts up in per-locale message tables.

    ``fr-CA`` falls back to ``fr``; unknown keys resolve to themselves.
    """

    def __init__(self, messages: dict[str, dict[str, str]] | None = None):
        self.messages = messages or {}

    def resolve(self, value: str | None, locale: str | None) -> str | None:
        if not value or not locale:
            return value
        for candidate in _candidates(locale):
            table = self.messages.get(candidate)
            if table and value in table:
                return table[value]
        return value


def _candidates(locale: str) -> list[str]:
    normalized = locale.replace("_", "-")
    language = normalized.split("-", 1)[0]
    return [normalized, language] if language != normalized else [normalized]
