"""
Code generation context for the near-syn generators.

This module provides a context class that holds all state needed during
code generation, separating state management from the generation logic.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..settings import Settings
from ..type_system import TypeTranslator
from .diagnostics import Diagnostics


@dataclass
class CodeGenerationContext:
    """
    Holds all state shared by the Markdown and TypeScript generators.
    """

    # Indentation state
    indent_level: int = 0
    indent_str: str = '    '

    # File context
    current_file_path: str = ''

    # Generator identification for headers and footers
    bin_name: str = 'near-syn'
    version: str = ''
    repository: str = ''
    now: str = ''  # ' on <timestamp>' or empty

    settings: Settings = field(default_factory=Settings)

    # Diagnostics collector
    _diagnostics: Optional[Diagnostics] = None

    # Translator (shares the diagnostics collector)
    _translator: Optional[TypeTranslator] = None

    @property
    def diagnostics(self) -> Diagnostics:
        """Get the diagnostics collector, creating one if needed."""
        if self._diagnostics is None:
            self._diagnostics = Diagnostics()
        return self._diagnostics

    @property
    def translator(self) -> TypeTranslator:
        """Get the type translator, creating one if needed."""
        if self._translator is None:
            self._translator = TypeTranslator(self.diagnostics)
        return self._translator

    def indent(self) -> str:
        """Return the current indentation string."""
        return self.indent_str * self.indent_level

    def reset_for_file(self, file_path: str = '') -> None:
        """Reset state for a new file."""
        self.current_file_path = file_path
        self.indent_level = 0

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        diagnostics: Optional[Diagnostics] = None,
        translator: Optional[TypeTranslator] = None,
        now: str = '',
    ) -> 'CodeGenerationContext':
        """
        Create a context from Settings.

        Args:
            settings: Attribute names and output options
            diagnostics: Shared diagnostics collector
            translator: Shared type translator
            now: Timestamp fragment appended to headers, empty to omit it

        Returns:
            A new CodeGenerationContext instance
        """
        from .. import __version__, __repository__

        settings = settings or Settings()
        return cls(
            indent_str=settings.indent,
            version=__version__,
            repository=__repository__,
            now=now,
            settings=settings,
            _diagnostics=diagnostics,
            _translator=translator,
        )
