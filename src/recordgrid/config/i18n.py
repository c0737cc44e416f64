"""
Internationalization (i18n) - Multi-language support
"""
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class I18n:
    """
    Internationalization manager for multi-language support

    Supported languages:
    - en: English
    - fr: French (Français)
    """

    TRANSLATIONS = {
        'en': {
            # Synthetic columns
            'column_sequence': '#',
            'column_id': 'Id',

            # Boolean values (friendly mode)
            'value_yes': 'Yes',
            'value_no': 'No',

            # Diagnostics
            'fault_cell_format': 'Attribute {column} failed, value: {value}',
            'error_mixed_types': 'Data source can only contain records of the same type.',
            'error_no_service': 'Service is not specified.',
            'status_loading': 'Loading records...',
            'status_rows': '{count} rows',
        },
        'fr': {
            'column_sequence': '#',
            'column_id': 'Id',

            'value_yes': 'Oui',
            'value_no': 'Non',

            'fault_cell_format': "L'attribut {column} a échoué, valeur : {value}",
            'error_mixed_types': 'La source de données ne peut contenir que des enregistrements du même type.',
            'error_no_service': "Le service n'est pas défini.",
            'status_loading': 'Chargement des enregistrements...',
            'status_rows': '{count} lignes',
        },
    }

    LANGUAGE_NAMES = {
        'en': 'English',
        'fr': 'Français',
    }

    _instance: Optional['I18n'] = None

    def __init__(self):
        self._current_language = 'en'

    @classmethod
    def get_instance(cls) -> 'I18n':
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_current_language(self) -> str:
        """Get current language code"""
        return self._current_language

    def set_language(self, language: str):
        """
        Set current language

        Args:
            language: Language code ('en', 'fr')
        """
        if language not in self.TRANSLATIONS:
            logger.warning(f"Unsupported language: {language}, keeping {self._current_language}")
            return
        self._current_language = language

    def get_available_languages(self) -> Dict[str, str]:
        """Get dictionary of language codes to display names"""
        return dict(self.LANGUAGE_NAMES)

    def t(self, key: str, **kwargs) -> str:
        """
        Translate a key to the current language

        Priority: current language > English > key itself

        Args:
            key: Translation key
            **kwargs: Format parameters for string interpolation

        Returns:
            Translated string or key if not found
        """
        text = self.TRANSLATIONS.get(self._current_language, {}).get(key)
        if text is None:
            text = self.TRANSLATIONS['en'].get(key, key)

        if kwargs:
            try:
                text = text.format(**kwargs)
            except (KeyError, IndexError, ValueError) as e:
                logger.error(f"Error formatting translation '{key}': {e}")

        return text


def get_i18n() -> I18n:
    """Get the global I18n instance"""
    return I18n.get_instance()


def t(key: str, **kwargs) -> str:
    """
    Translate a key to the current language

    Args:
        key: Translation key
        **kwargs: Format parameters

    Returns:
        Translated string
    """
    return I18n.get_instance().t(key, **kwargs)
