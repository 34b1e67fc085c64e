"""
AST node definitions for Rust parsing.

This module contains the dataclasses representing nodes in the item-level
syntax tree produced by the Rust parser. Function bodies and expressions are
not represented; the parser skips over them.
"""

from dataclasses import dataclass, field
from typing import Optional, List


# =============================================================================
# BASE NODE
# =============================================================================

@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    pass


# =============================================================================
# ATTRIBUTES
# =============================================================================

@dataclass
class Attribute(ASTNode):
    """Represents an attribute (`#[path]`, `#[path(a, b)]`, `#[path = "lit"]`).

    Doc comments are desugared into `doc` attributes carrying their text in
    `value`, the same way the Rust compiler sees them.
    """
    path: str
    args: List[str] = field(default_factory=list)  # nested meta paths, e.g. derive(Serialize)
    value: Optional[str] = None  # string literal for name-value attributes
    is_inner: bool = False
    line: int = 0

    @property
    def is_doc(self) -> bool:
        return self.path == 'doc' and self.value is not None


# =============================================================================
# TYPE NODES
# =============================================================================

@dataclass
class TypeExpr(ASTNode):
    """Base class for all type expressions."""
    pass


@dataclass
class PathSegment(ASTNode):
    """A single path segment with optional generic type arguments."""
    name: str
    args: List[TypeExpr] = field(default_factory=list)

    def __str__(self) -> str:
        if self.args:
            return f'{self.name}<{", ".join(str(a) for a in self.args)}>'
        return self.name


@dataclass
class PathType(TypeExpr):
    """Represents a path type (e.g., u64, Vec<T>, near_sdk::json_types::U128)."""
    segments: List[PathSegment] = field(default_factory=list)

    @property
    def name(self) -> str:
        """The trailing segment identifier."""
        return self.segments[-1].name if self.segments else ''

    @property
    def args(self) -> List[TypeExpr]:
        """The generic arguments of the trailing segment."""
        return self.segments[-1].args if self.segments else []

    def joined(self) -> str:
        return '::'.join(seg.name for seg in self.segments)

    def __str__(self) -> str:
        return '::'.join(str(seg) for seg in self.segments)


@dataclass
class TupleType(TypeExpr):
    """Represents a tuple type; the unit type `()` has no elements."""
    elems: List[TypeExpr] = field(default_factory=list)

    def __str__(self) -> str:
        if len(self.elems) == 1:
            return f'({self.elems[0]},)'
        return f'({", ".join(str(e) for e in self.elems)})'


@dataclass
class ReferenceType(TypeExpr):
    """Represents a reference type (e.g., &str, &'a mut T)."""
    elem: TypeExpr
    mutable: bool = False
    lifetime: Optional[str] = None

    def __str__(self) -> str:
        lifetime = f'{self.lifetime} ' if self.lifetime else ''
        mut = 'mut ' if self.mutable else ''
        return f'&{lifetime}{mut}{self.elem}'


@dataclass
class ArrayType(TypeExpr):
    """Represents an array `[T; N]` or, when `length` is None, a slice `[T]`."""
    elem: TypeExpr
    length: Optional[str] = None

    def __str__(self) -> str:
        if self.length is None:
            return f'[{self.elem}]'
        return f'[{self.elem}; {self.length}]'


@dataclass
class RawType(TypeExpr):
    """A type outside the recognized subset, kept as its source text."""
    text: str

    def __str__(self) -> str:
        return self.text


# =============================================================================
# DEFINITION NODES
# =============================================================================

@dataclass
class Item(ASTNode):
    """Base class for items (top-level, trait or impl members)."""
    pass


@dataclass
class TypeAlias(Item):
    """Represents a type alias (`type A = u64;`)."""
    name: str
    ty: Optional[TypeExpr] = None  # None for associated types without a default
    generics: List[str] = field(default_factory=list)
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    line: int = 0


@dataclass
class FieldDefinition(ASTNode):
    """Represents a struct or variant field; tuple fields have no name."""
    name: Optional[str]
    ty: TypeExpr
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    line: int = 0


@dataclass
class StructDefinition(Item):
    """Represents a struct (or union) definition."""
    name: str
    fields: List[FieldDefinition] = field(default_factory=list)
    style: str = 'named'  # 'named', 'tuple', 'unit'
    generics: List[str] = field(default_factory=list)
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    is_union: bool = False
    line: int = 0


@dataclass
class VariantDefinition(ASTNode):
    """Represents an enum variant."""
    name: str
    fields: List[FieldDefinition] = field(default_factory=list)
    style: str = 'unit'  # 'named', 'tuple', 'unit'
    discriminant: Optional[str] = None
    attrs: List[Attribute] = field(default_factory=list)
    line: int = 0


@dataclass
class EnumDefinition(Item):
    """Represents an enum definition."""
    name: str
    variants: List[VariantDefinition] = field(default_factory=list)
    generics: List[str] = field(default_factory=list)
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    line: int = 0


@dataclass
class Receiver(ASTNode):
    """Represents a method receiver (`self`, `&self`, `&mut self`, `mut self`, `self: T`)."""
    reference: bool = False
    mutable: bool = False
    lifetime: Optional[str] = None
    ty: Optional[TypeExpr] = None  # explicit `self: Type`


@dataclass
class Parameter(ASTNode):
    """Represents a typed function parameter.

    `name` is None when the pattern is not a plain identifier, e.g. `(a, b): (u8, u8)`.
    """
    name: Optional[str]
    ty: TypeExpr
    pattern: str = ''
    attrs: List[Attribute] = field(default_factory=list)


@dataclass
class Signature(ASTNode):
    """Represents a function signature."""
    name: str
    receiver: Optional[Receiver] = None
    params: List[Parameter] = field(default_factory=list)
    output: Optional[TypeExpr] = None  # None when there is no `->`
    generics: List[str] = field(default_factory=list)
    is_const: bool = False
    is_async: bool = False
    is_unsafe: bool = False


@dataclass
class FunctionDefinition(Item):
    """Represents a free function or a method in a trait or impl block."""
    sig: Signature
    has_body: bool = True
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    line: int = 0

    @property
    def name(self) -> str:
        return self.sig.name


@dataclass
class TraitDefinition(Item):
    """Represents a trait definition."""
    name: str
    methods: List[FunctionDefinition] = field(default_factory=list)
    generics: List[str] = field(default_factory=list)
    supertraits: List[str] = field(default_factory=list)
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    line: int = 0


@dataclass
class ImplDefinition(Item):
    """Represents an inherent (`impl T`) or trait (`impl Trait for T`) block."""
    self_ty: TypeExpr
    trait_path: Optional[PathType] = None
    negative: bool = False
    methods: List[FunctionDefinition] = field(default_factory=list)
    generics: List[str] = field(default_factory=list)
    attrs: List[Attribute] = field(default_factory=list)
    line: int = 0

    @property
    def trait_name(self) -> Optional[str]:
        return self.trait_path.name if self.trait_path else None


@dataclass
class ModuleDefinition(Item):
    """Represents a module; `items` is None for out-of-line `mod name;`."""
    name: str
    items: Optional[List[Item]] = None
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    line: int = 0


@dataclass
class OtherItem(Item):
    """An item that carries no interface information (use, const, macro, ...)."""
    kind: str
    name: Optional[str] = None
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ''
    line: int = 0


# =============================================================================
# TOP-LEVEL NODE
# =============================================================================

@dataclass
class SourceFile(ASTNode):
    """Root node representing an entire Rust source file."""
    attrs: List[Attribute] = field(default_factory=list)  # inner attributes and //! docs
    items: List[Item] = field(default_factory=list)
    path: str = ''
