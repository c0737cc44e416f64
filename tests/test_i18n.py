"""
Tests for translations.
"""
from recordgrid.config.i18n import get_i18n, t


class TestI18n:
    """Test the translation manager."""

    def test_available_languages(self):
        assert get_i18n().get_available_languages() == {"en": "English", "fr": "Français"}

    def test_translate_with_parameters(self):
        assert t("status_rows", count=3) == "3 rows"
        get_i18n().set_language("fr")
        assert t("status_rows", count=3) == "3 lignes"

    def test_unsupported_language_is_ignored(self):
        get_i18n().set_language("xx")
        assert get_i18n().get_current_language() == "en"

    def test_unknown_key_returns_key(self):
        assert t("no_such_key") == "no_such_key"

    def test_bad_parameters_keep_template(self):
        assert t("status_rows") == "{count} rows"
        assert t("status_rows", other=1) == "{count} rows"
