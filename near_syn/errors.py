"""
Fatal errors raised by near-syn.

Recoverable issues are collected as diagnostics instead (see
codegen/diagnostics.py); a NearSynError aborts the whole run and no
artifact is written.
"""


class NearSynError(Exception):
    """A fatal error tied to an input file (or configuration file)."""

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(f'{file_path}: {reason}')
