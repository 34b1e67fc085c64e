"""
Rust to TypeScript type translation.

The TypeTranslator walks a parsed type expression and produces the
TypeScript type used in generated bindings and documentation. Only a closed
set of shapes is recognized (paths, tuples, references, arrays and slices);
everything else degrades to `unknown` with a diagnostic rather than failing
the run.
"""

from enum import IntEnum
from typing import NamedTuple, Optional, Sequence, Tuple, TYPE_CHECKING

from ..parser.ast_nodes import (
    TypeExpr,
    PathType,
    TupleType,
    ReferenceType,
    ArrayType,
    RawType,
)
from .mappings import (
    RUST_TO_TS_MAP,
    OPTION_TYPES,
    SEQUENCE_TYPES,
    MAP_TYPES,
    TRANSPARENT_TYPES,
    RESULT_TYPES,
    VOID_RETURN_TYPES,
)

if TYPE_CHECKING:
    from ..codegen.diagnostics import Diagnostics


UNKNOWN_TYPE = 'unknown'
VOID_TYPE = 'void'
SELF_TYPE = 'Self'


class _Assoc(IntEnum):
    """How tightly a translated type binds when embedded in another one."""
    SINGLE = 0  # string, Record<K, V>, [A, B]
    ARRAY = 1   # T[]
    UNION = 2   # T|null


def use_paren(inner: _Assoc, outer: _Assoc) -> bool:
    """Check whether `inner` needs parentheses inside an `outer` context."""
    return inner > outer


class _Site(NamedTuple):
    """Where a type is being translated: location for diagnostics, and what `Self` names."""
    file_path: str
    line: Optional[int]
    self_type: Optional[str]


class TypeTranslator:
    """
    Translates Rust type expressions to TypeScript types.

    Translation is deterministic; the only side effect is reporting
    unsupported shapes to the diagnostics collector, if one is given.
    """

    def __init__(self, diagnostics: Optional['Diagnostics'] = None):
        self._diagnostics = diagnostics

    def translate(self, ty: Optional[TypeExpr], file_path: str = '', line: Optional[int] = None,
                  self_type: Optional[str] = None) -> str:
        """
        Translate a type in parameter or field position.

        Args:
            ty: The type expression to translate
            file_path: Source file, for diagnostics
            line: Source line, for diagnostics
            self_type: Name substituted for `Self`; without one `Self` is unknown

        Returns:
            The TypeScript type string
        """
        text, _ = self._translate(ty, _Site(file_path, line, self_type))
        return text

    def translate_return(self, output: Optional[TypeExpr], file_path: str = '',
                         line: Optional[int] = None, self_type: Optional[str] = None) -> str:
        """Translate a method's return type; absent, `()` and a bare `Self` all become void."""
        if output is None:
            return VOID_TYPE
        if (isinstance(output, PathType) and len(output.segments) == 1
                and output.name in VOID_RETURN_TYPES and not output.args):
            return VOID_TYPE
        return self.translate(output, file_path, line, self_type)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _translate(self, ty: Optional[TypeExpr], site: _Site) -> Tuple[str, _Assoc]:
        if isinstance(ty, PathType):
            return self._translate_path(ty, site)
        if isinstance(ty, TupleType):
            if not ty.elems:
                return VOID_TYPE, _Assoc.SINGLE
            elems = [self._translate(e, site)[0] for e in ty.elems]
            return f'[{", ".join(elems)}]', _Assoc.SINGLE
        if isinstance(ty, ReferenceType):
            return self._translate(ty.elem, site)
        if isinstance(ty, ArrayType):
            return self._array_of(ty.elem, site)
        if isinstance(ty, RawType):
            self._warn_unsupported(ty.text, site)
            return UNKNOWN_TYPE, _Assoc.SINGLE

        self._warn_unsupported(str(ty), site)
        return UNKNOWN_TYPE, _Assoc.SINGLE

    def _translate_path(self, ty: PathType, site: _Site) -> Tuple[str, _Assoc]:
        name = ty.name
        args = ty.args

        if name == SELF_TYPE and len(ty.segments) == 1 and not args:
            if site.self_type:
                return site.self_type, _Assoc.SINGLE
            self._warn_unsupported(SELF_TYPE, site)
            return UNKNOWN_TYPE, _Assoc.SINGLE

        if name in RUST_TO_TS_MAP and not args:
            return RUST_TO_TS_MAP[name], _Assoc.SINGLE

        if name in OPTION_TYPES:
            if not self._check_arity(name, args, (1,), site):
                return UNKNOWN_TYPE, _Assoc.SINGLE
            inner = self._wrapped(args[0], _Assoc.UNION, site)
            return f'{inner}|null', _Assoc.UNION

        if name in SEQUENCE_TYPES:
            # Vec<T, A> and HashSet<T, S> carry an allocator or hasher
            if not self._check_arity(name, args, (1, 2), site):
                return UNKNOWN_TYPE, _Assoc.SINGLE
            return self._array_of(args[0], site)

        if name in MAP_TYPES:
            if not self._check_arity(name, args, (2, 3), site):
                return UNKNOWN_TYPE, _Assoc.SINGLE
            key = self._translate(args[0], site)[0]
            value = self._translate(args[1], site)[0]
            return f'Record<{key}, {value}>', _Assoc.SINGLE

        if name in TRANSPARENT_TYPES or name in RESULT_TYPES:
            if not self._check_arity(name, args, (1, 2), site):
                return UNKNOWN_TYPE, _Assoc.SINGLE
            return self._translate(args[0], site)

        if args:
            # User-defined generic type
            rendered = [self._translate(a, site)[0] for a in args]
            return f'{name}<{", ".join(rendered)}>', _Assoc.SINGLE

        # Unknown names (user types, NEAR JSON types) pass through
        return name, _Assoc.SINGLE

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _wrapped(self, ty: TypeExpr, outer: _Assoc, site: _Site) -> str:
        text, assoc = self._translate(ty, site)
        if use_paren(assoc, outer):
            return f'({text})'
        return text

    def _array_of(self, elem: TypeExpr, site: _Site) -> Tuple[str, _Assoc]:
        return f'{self._wrapped(elem, _Assoc.ARRAY, site)}[]', _Assoc.ARRAY

    def _check_arity(self, name: str, args: Sequence[TypeExpr], accepted: Tuple[int, ...],
                     site: _Site) -> bool:
        if len(args) in accepted:
            return True
        if self._diagnostics is not None:
            self._diagnostics.warn_arity_mismatch(name, accepted[0], len(args), site.file_path, site.line)
        return False

    def _warn_unsupported(self, text: str, site: _Site) -> None:
        if self._diagnostics is not None:
            self._diagnostics.warn_unsupported_type(text, site.file_path, site.line)
