"""
Process-wide language setting with subscriber notification.
"""

import logging
from typing import Callable, List, Optional

from .storage import KeyValueStore
from .types import DEFAULT_LANGUAGE, Language

logger = logging.getLogger(__name__)

LANGUAGE_KEY = "agri-helper-lang"

LanguageListener = Callable[[Language], None]


class LanguageSettings:
    """
    Holds the selected language, persists it, and notifies subscribers on change.

    A stored value that is not a known locale falls back to en-US.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else KeyValueStore()
        self._language = Language.parse(self.store.get(LANGUAGE_KEY), DEFAULT_LANGUAGE)
        self._listeners: List[LanguageListener] = []

    @property
    def language(self) -> Language:
        return self._language

    def set_language(self, language: Language) -> None:
        language = Language(language)
        if language == self._language:
            return
        self._language = language
        self.store.set(LANGUAGE_KEY, language.value)
        logger.info(f"Language changed to {language.value}")
        for listener in list(self._listeners):
            listener(language)

    def subscribe(self, listener: LanguageListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
