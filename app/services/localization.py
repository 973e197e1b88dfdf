# /app/services/localization.py

"""
Resolves display strings from a collection of per-locale text entries.

- primary: the text for the requested locale. For English, a Latin
  transliteration wins when one exists. Falls back to English, then to
  whatever entry comes first.
- secondary: the alternate-script text shown under the primary one. Arabic
  for every locale except Arabic itself, which gets English instead.
"""

from typing import Iterable, Optional, Union

from app.models.genre_model import LocalizedEntry, PathLocale

DEFAULT_LOCALE = "en"
ORIGINAL_LOCALE = "ar"


def _locale_value(locale: Union[PathLocale, str]) -> str:
    return locale.value if isinstance(locale, PathLocale) else str(locale)


def _find_text(entries, locale: str) -> Optional[str]:
    for entry in entries:
        if entry.locale == locale and entry.text:
            return entry.text
    return None


def get_primary_localized_text(
    entries: Iterable[LocalizedEntry],
    locale: Union[PathLocale, str],
    transliteration: Optional[str] = None,
) -> Optional[str]:
    entries = list(entries)
    locale = _locale_value(locale)

    if locale == DEFAULT_LOCALE and transliteration:
        return transliteration

    text = _find_text(entries, locale) or _find_text(entries, DEFAULT_LOCALE)
    if text:
        return text
    return entries[0].text if entries else None


def get_secondary_localized_text(
    entries: Iterable[LocalizedEntry],
    locale: Union[PathLocale, str],
    transliteration: Optional[str] = None,
) -> Optional[str]:
    entries = list(entries)
    locale = _locale_value(locale)

    if locale == ORIGINAL_LOCALE:
        text = _find_text(entries, DEFAULT_LOCALE)
    else:
        text = _find_text(entries, ORIGINAL_LOCALE)

    if text is None or text == get_primary_localized_text(entries, locale, transliteration):
        return None
    return text
