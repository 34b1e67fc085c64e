"""
Diagnostic/warning system for near-syn.

Collects and reports recoverable issues found while resolving contract
interfaces: types outside the translatable subset, parameters that cannot
be named, traits missing from the registry. None of these abort a run;
the generated artifacts fall back to a placeholder instead.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for near-syn diagnostics."""
    WARNING = 'warning'
    INFO = 'info'


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    severity: DiagnosticSeverity
    code: str
    message: str
    file_path: str = ''
    line: Optional[int] = None
    construct: str = ''  # e.g., 'type', 'parameter', 'trait'

    def __str__(self) -> str:
        location = self.file_path
        if self.line:
            location = f'{location}:{self.line}'
        if location:
            return f'[{self.severity.value}] {location}: {self.message} ({self.code})'
        return f'[{self.severity.value}] {self.message} ({self.code})'


class Diagnostics:
    """
    Collects diagnostics during interface resolution and rendering.

    Usage:
        diag = Diagnostics()
        diag.warn_unsupported_type("fn(u8)", "lib.rs", line=42)
        # ... after generation ...
        diag.print_summary()
    """

    def __init__(self, verbose: bool = False):
        self._diagnostics: List[Diagnostic] = []
        self._verbose = verbose

    @property
    def warnings(self) -> List[Diagnostic]:
        """Get only warning-level diagnostics."""
        return [d for d in self._diagnostics if d.severity == DiagnosticSeverity.WARNING]

    @property
    def infos(self) -> List[Diagnostic]:
        """Get only info-level diagnostics."""
        return [d for d in self._diagnostics if d.severity == DiagnosticSeverity.INFO]

    @property
    def count(self) -> int:
        """Get total diagnostic count."""
        return len(self._diagnostics)

    def codes(self) -> List[str]:
        """Get the codes of all diagnostics in the order they were reported."""
        return [d.code for d in self._diagnostics]

    # =========================================================================
    # SPECIFIC WARNING METHODS
    # =========================================================================

    def warn_unsupported_type(
        self,
        type_text: str,
        file_path: str = '',
        line: Optional[int] = None,
    ) -> None:
        """Warn that a type expression could not be translated."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W001',
            message=f'Type "{type_text}" has no TypeScript equivalent; using unknown.',
            file_path=file_path,
            line=line,
            construct='type',
        ))

    def warn_arity_mismatch(
        self,
        type_name: str,
        expected: int,
        found: int,
        file_path: str = '',
        line: Optional[int] = None,
    ) -> None:
        """Warn that a known generic container has the wrong number of type arguments."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W002',
            message=f'{type_name} expects {expected} type argument(s) but got {found}; '
                    f'using unknown.',
            file_path=file_path,
            line=line,
            construct='type',
        ))

    def warn_parameter_pattern(
        self,
        method_name: str,
        pattern: str,
        file_path: str = '',
        line: Optional[int] = None,
    ) -> None:
        """Warn that a parameter pattern is not a plain identifier and was skipped."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W003',
            message=f'Parameter pattern "{pattern}" of method "{method_name}" '
                    f'is not an identifier; parameter skipped.',
            file_path=file_path,
            line=line,
            construct='parameter',
        ))

    def warn_unsupported_construct(
        self,
        construct: str,
        detail: str = '',
        file_path: str = '',
        line: Optional[int] = None,
    ) -> None:
        """Generic warning for unsupported constructs."""
        msg = f'Unsupported construct: {construct}'
        if detail:
            msg += f' ({detail})'
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W099',
            message=msg,
            file_path=file_path,
            line=line,
            construct=construct,
        ))

    # =========================================================================
    # INFO METHODS
    # =========================================================================

    def info_unregistered_trait(
        self,
        trait_name: str,
        file_path: str = '',
        line: Optional[int] = None,
    ) -> None:
        """Info that an implemented trait has no definition in any input file."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.INFO,
            code='I001',
            message=f'Trait "{trait_name}" is not defined in the input files; '
                    f'its methods carry no trait documentation.',
            file_path=file_path,
            line=line,
            construct='trait',
        ))

    def info_trait_redefined(
        self,
        trait_name: str,
        file_path: str = '',
        line: Optional[int] = None,
    ) -> None:
        """Info that a trait definition replaced an earlier one with the same name."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.INFO,
            code='I002',
            message=f'Trait "{trait_name}" is defined more than once; the last definition wins.',
            file_path=file_path,
            line=line,
            construct='trait',
        ))

    # =========================================================================
    # REPORTING
    # =========================================================================

    def print_summary(self, file=None) -> None:
        """Print a summary of all diagnostics to stderr (or specified file)."""
        if file is None:
            file = sys.stderr

        if not self._diagnostics:
            return

        warnings = self.warnings
        infos = self.infos

        if warnings:
            print(f'\nnear-syn warnings ({len(warnings)}):', file=file)
            # Group by construct type
            by_construct: dict = {}
            for w in warnings:
                key = w.construct or 'other'
                if key not in by_construct:
                    by_construct[key] = []
                by_construct[key].append(w)

            for construct, diags in sorted(by_construct.items()):
                print(f'  {construct}: {len(diags)} occurrence(s)', file=file)
                if self._verbose:
                    for d in diags:
                        print(f'    {d}', file=file)

        if infos and self._verbose:
            print(f'\nnear-syn info ({len(infos)}):', file=file)
            for d in infos:
                print(f'  {d}', file=file)

    def get_summary(self) -> str:
        """Get a summary string of all warnings."""
        warnings = self.warnings
        if not warnings:
            return 'No near-syn warnings.'

        by_construct: dict = {}
        for w in warnings:
            key = w.construct or 'other'
            if key not in by_construct:
                by_construct[key] = 0
            by_construct[key] += 1

        parts = [f'{count} {construct}' for construct, count in sorted(by_construct.items())]
        return f'near-syn warnings: {", ".join(parts)}'
