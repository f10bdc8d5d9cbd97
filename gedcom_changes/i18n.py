import gettext
from functools import lru_cache

from config import LOCALE_DIR, LANGUAGE


@lru_cache(maxsize=None)
def _catalogue(language: str) -> gettext.NullTranslations:
    return gettext.translation("messages", localedir=LOCALE_DIR, languages=[language], fallback=True)


def translate(message: str, language: str = LANGUAGE) -> str:
    return _catalogue(language).gettext(message)
