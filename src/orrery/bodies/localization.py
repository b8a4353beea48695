"""
Localized body names.

Bodies translate their primary name once, at construction, through the
active gettext translations. The default is gettext.NullTranslations, which
leaves every name untranslated.
"""

import gettext
import logging

logger = logging.getLogger(__name__)

_translations = gettext.NullTranslations()


def set_translations(translations: gettext.NullTranslations) -> gettext.NullTranslations:
    """Install translations for body names; returns the previous ones."""
    global _translations
    previous = _translations
    _translations = translations
    logger.debug("Installed body name translations %r", translations)
    return previous


def load_translations(domain: str, localedir: str, languages=None) -> gettext.NullTranslations:
    """Load a gettext catalog, falling back to untranslated names."""
    return gettext.translation(domain, localedir=localedir,
                               languages=languages, fallback=True)


def translate(name: str) -> str:
    return _translations.gettext(name)
