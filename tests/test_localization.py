# /tests/test_localization.py

from app.models.genre_model import LocalizedEntry, PathLocale
from app.services.localization import get_primary_localized_text, get_secondary_localized_text

ENTRIES = [
    LocalizedEntry(locale="ar", text="الفقه"),
    LocalizedEntry(locale="en", text="Jurisprudence"),
    LocalizedEntry(locale="fr", text="Jurisprudence islamique"),
]


def test_primary_uses_requested_locale():
    assert get_primary_localized_text(ENTRIES, PathLocale.fr) == "Jurisprudence islamique"
    assert get_primary_localized_text(ENTRIES, "ar") == "الفقه"


def test_primary_prefers_transliteration_for_english_only():
    assert get_primary_localized_text(ENTRIES, "en", transliteration="Fiqh") == "Fiqh"
    assert get_primary_localized_text(ENTRIES, "fr", transliteration="Fiqh") == "Jurisprudence islamique"


def test_primary_falls_back_to_english_then_first_entry():
    assert get_primary_localized_text(ENTRIES, "tr") == "Jurisprudence"
    assert get_primary_localized_text(ENTRIES[:1], "tr") == "الفقه"
    assert get_primary_localized_text([], "en") is None


def test_secondary_is_arabic_unless_arabic_was_requested():
    assert get_secondary_localized_text(ENTRIES, "en") == "الفقه"
    assert get_secondary_localized_text(ENTRIES, "ar") == "Jurisprudence"


def test_secondary_is_absent_when_missing_or_same_as_primary():
    assert get_secondary_localized_text(ENTRIES[1:], "en") is None
    # Only Arabic available: primary falls back to it, so no secondary.
    assert get_secondary_localized_text(ENTRIES[:1], "tr") is None
