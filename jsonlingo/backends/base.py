"""
Translator backend interface.

The orchestrator only ever talks to a backend through this interface.
Implementations turn every transport or HTTP failure into `BackendError`
(retryable) and detection failures into `DetectionError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from jsonlingo.core.models import LanguageInfo


class TranslatorBackend(ABC):
    """
    An external machine-translation service.
    
    Example:
        class EchoBackend(TranslatorBackend):
            backend_id = "echo"
            
            async def translate(self, text, source, target):
                return text
            ...
    """
    
    backend_id: str = "base"
    
    @abstractmethod
    async def translate(self, text: str, source: str, target: str) -> str:
        """Translate one string. Raises BackendError on any failure."""
        pass
    
    @abstractmethod
    async def detect_language(self, text: str) -> str:
        """Return the detected language code. Raises DetectionError."""
        pass
    
    @abstractmethod
    async def list_languages(self) -> list[LanguageInfo]:
        """Languages the backend supports."""
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """True if the backend is reachable and answering."""
        pass
    
    async def aclose(self) -> None:
        """Release network resources."""
        pass
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.backend_id})>"
