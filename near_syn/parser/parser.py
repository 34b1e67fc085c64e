"""
Rust parser implementation.

The Parser converts a stream of tokens from the Lexer into an item-level
syntax tree: attributes, type aliases, structs, enums, traits, impl blocks,
functions and modules. Function bodies, initializers and macro bodies are
skipped by balanced delimiter matching.
"""

from typing import List, Optional, Tuple

from ..lexer import Token, TokenType, OPENING_DELIMITERS
from .ast_nodes import (
    # Top-level
    SourceFile,
    Attribute,
    # Items
    Item,
    TypeAlias,
    FieldDefinition,
    StructDefinition,
    VariantDefinition,
    EnumDefinition,
    Receiver,
    Parameter,
    Signature,
    FunctionDefinition,
    TraitDefinition,
    ImplDefinition,
    ModuleDefinition,
    OtherItem,
    # Types
    TypeExpr,
    PathSegment,
    PathType,
    TupleType,
    ReferenceType,
    ArrayType,
    RawType,
)


CLOSING_DELIMITERS = set(OPENING_DELIMITERS.values())

PATH_SEGMENT_TOKENS = (
    TokenType.IDENTIFIER,
    TokenType.SELF_TYPE,
    TokenType.SELF_VALUE,
    TokenType.CRATE,
    TokenType.SUPER,
)

# Token rendering for raw types, patterns and restricted visibilities
NO_SPACE_BEFORE = {
    TokenType.COMMA, TokenType.SEMICOLON, TokenType.RPAREN, TokenType.RBRACKET,
    TokenType.GT, TokenType.PATH_SEP, TokenType.DOT, TokenType.COLON,
}
NO_SPACE_AFTER = {
    TokenType.LPAREN, TokenType.LBRACKET, TokenType.LT, TokenType.PATH_SEP,
    TokenType.AMPERSAND, TokenType.STAR, TokenType.POUND, TokenType.DOT,
    TokenType.DOLLAR, TokenType.BANG,
}


def render_tokens(tokens: List[Token]) -> str:
    """Render a token slice back to compact source text."""
    text = ''
    prev: Optional[Token] = None
    for tok in tokens:
        piece = f'"{tok.value}"' if tok.type == TokenType.STRING_LITERAL else tok.value
        if prev is not None and prev.type not in NO_SPACE_AFTER and tok.type not in NO_SPACE_BEFORE:
            glued = tok.type in (TokenType.LT, TokenType.LPAREN) and prev.type in (
                TokenType.IDENTIFIER, TokenType.SELF_TYPE, TokenType.FN)
            if not glued:
                text += ' '
        text += piece
        prev = tok
    return text


def block_doc_lines(text: str) -> List[str]:
    """Split a `/** ... */` doc comment into lines, dropping `*` decoration."""
    lines = text.split('\n')
    if len(lines) == 1:
        return lines
    # Text on the opening `/**` line never carries the `*` decoration
    head = lines[:1] if lines[0].strip() else []
    lines = lines[1:]
    if lines and not lines[-1].strip():
        lines = lines[:-1]
    decorated = [line for line in lines if line.strip()]
    if decorated and all(line.lstrip().startswith('*') for line in decorated):
        lines = [line.lstrip()[1:] if line.strip() else '' for line in lines]
    return head + lines


class Parser:
    """
    Recursive descent parser for Rust source code.

    Parses a stream of tokens into a SourceFile syntax tree.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Token:
        """Look ahead in the token stream without consuming."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def current(self) -> Token:
        """Return the current token."""
        return self.peek()

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self.current()
        self.pos += 1
        return token

    def match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current().type in types

    def match_ident(self, value: str, offset: int = 0) -> bool:
        """Check for a contextual keyword such as `union`, `auto` or `default`."""
        tok = self.peek(offset)
        return tok.type == TokenType.IDENTIFIER and tok.value == value

    def expect(self, token_type: TokenType, message: str = '') -> Token:
        """Consume the current token if it matches, otherwise raise an error."""
        if self.current().type != token_type:
            raise SyntaxError(
                f"Expected {token_type.name} but got {self.current().type.name} "
                f"at line {self.current().line}, column {self.current().column}: {message}"
            )
        return self.advance()

    def expect_ident(self, message: str = '') -> str:
        return self.expect(TokenType.IDENTIFIER, message).value

    # =========================================================================
    # DELIMITED GROUPS
    # =========================================================================

    def skip_group(self) -> List[Token]:
        """Consume a balanced (), [] or {} group and return its inner tokens."""
        open_tok = self.advance()
        if open_tok.type not in OPENING_DELIMITERS:
            raise SyntaxError(
                f"Expected a delimiter but got {open_tok.type.name} "
                f"at line {open_tok.line}, column {open_tok.column}"
            )
        start = self.pos
        stack = [OPENING_DELIMITERS[open_tok.type]]
        while stack:
            tok = self.advance()
            if tok.type == TokenType.EOF:
                raise SyntaxError(
                    f"Unclosed delimiter '{open_tok.value}' opened at line {open_tok.line}, "
                    f"column {open_tok.column}"
                )
            if tok.type in OPENING_DELIMITERS:
                stack.append(OPENING_DELIMITERS[tok.type])
            elif tok.type in CLOSING_DELIMITERS:
                expected = stack.pop()
                if tok.type != expected:
                    raise SyntaxError(
                        f"Mismatched closing delimiter '{tok.value}' "
                        f"at line {tok.line}, column {tok.column}"
                    )
        return self.tokens[start:self.pos - 1]

    def skip_until(self, *types: TokenType) -> List[Token]:
        """Consume tokens up to (not including) one of `types` at nesting depth 0."""
        start = self.pos
        while not self.match(*types):
            tok = self.current()
            if tok.type == TokenType.EOF:
                expected = ' or '.join(t.name for t in types)
                raise SyntaxError(f"Expected {expected} but reached end of file")
            if tok.type in OPENING_DELIMITERS:
                self.skip_group()
            elif tok.type in CLOSING_DELIMITERS:
                raise SyntaxError(
                    f"Unexpected '{tok.value}' at line {tok.line}, column {tok.column}"
                )
            else:
                self.advance()
        return self.tokens[start:self.pos]

    # =========================================================================
    # TOP-LEVEL PARSING
    # =========================================================================

    def parse(self) -> SourceFile:
        """Parse the entire source file into a SourceFile syntax tree."""
        unit = SourceFile()
        unit.attrs = self.parse_inner_attributes()

        while not self.match(TokenType.EOF):
            if self.match(TokenType.SEMICOLON):
                self.advance()
                continue
            unit.items.append(self.parse_item())

        return unit

    def parse_items_block(self) -> Tuple[List[Attribute], List[Item]]:
        """Parse `{ #![inner] items... }` as found in inline modules."""
        self.expect(TokenType.LBRACE)
        inner = self.parse_inner_attributes()
        items = []
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            if self.match(TokenType.SEMICOLON):
                self.advance()
                continue
            items.append(self.parse_item())
        self.expect(TokenType.RBRACE)
        return inner, items

    # =========================================================================
    # ATTRIBUTES
    # =========================================================================

    def parse_inner_attributes(self) -> List[Attribute]:
        """Parse `#![...]` attributes and `//!` doc comments."""
        attrs = []
        while True:
            if self.match(TokenType.INNER_DOC):
                attrs.extend(self.doc_attributes(self.advance(), is_inner=True))
            elif (self.match(TokenType.POUND) and self.peek(1).type == TokenType.BANG
                  and self.peek(2).type == TokenType.LBRACKET):
                self.advance()  # #
                self.advance()  # !
                attrs.append(self.parse_attribute_body(is_inner=True))
            else:
                break
        return attrs

    def parse_outer_attributes(self) -> List[Attribute]:
        """Parse `#[...]` attributes and `///` doc comments preceding an item."""
        attrs = []
        while True:
            if self.match(TokenType.OUTER_DOC):
                attrs.extend(self.doc_attributes(self.advance(), is_inner=False))
            elif self.match(TokenType.POUND) and self.peek(1).type == TokenType.LBRACKET:
                self.advance()  # #
                attrs.append(self.parse_attribute_body(is_inner=False))
            else:
                break
        return attrs

    def doc_attributes(self, token: Token, is_inner: bool) -> List[Attribute]:
        """Desugar a doc comment token into one `doc` attribute per line."""
        return [
            Attribute(path='doc', value=line, is_inner=is_inner, line=token.line)
            for line in block_doc_lines(token.value)
        ]

    def parse_attribute_body(self, is_inner: bool) -> Attribute:
        """Parse `[path]`, `[path(args)]` or `[path = "lit"]` after the `#`/`#!`."""
        line = self.current().line
        self.expect(TokenType.LBRACKET)
        attr = Attribute(path=self.parse_simple_path(), is_inner=is_inner, line=line)

        if self.match(TokenType.EQ):
            self.advance()
            if self.match(TokenType.STRING_LITERAL) and self.peek(1).type == TokenType.RBRACKET:
                attr.value = self.advance().value
            else:
                # e.g. #[doc = include_str!("README.md")]
                self.skip_until(TokenType.RBRACKET)
        elif self.match(TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE):
            attr.args = self.meta_paths(self.skip_group())

        self.expect(TokenType.RBRACKET, 'unterminated attribute')
        return attr

    def parse_simple_path(self) -> str:
        """Parse an attribute path such as `near_bindgen` or `rustfmt::skip`."""
        parts = []
        if self.match(TokenType.PATH_SEP):
            self.advance()
        while True:
            tok = self.advance()
            if not tok.value.isidentifier():
                raise SyntaxError(
                    f"Expected attribute path but got {tok.type.name} "
                    f"at line {tok.line}, column {tok.column}"
                )
            parts.append(tok.value)
            if self.match(TokenType.PATH_SEP):
                self.advance()
            else:
                break
        return '::'.join(parts)

    def meta_paths(self, tokens: List[Token]) -> List[str]:
        """Extract the leading path of each comma-separated nested meta item."""
        paths = []
        depth = 0
        current: List[str] = []
        closed = False
        for tok in tokens:
            if depth == 0 and tok.type == TokenType.COMMA:
                if current:
                    paths.append(''.join(current))
                current, closed = [], False
                continue
            if tok.type in OPENING_DELIMITERS:
                depth += 1
                closed = True
                continue
            if tok.type in CLOSING_DELIMITERS:
                depth -= 1
                continue
            if depth > 0 or closed:
                continue
            if tok.type == TokenType.PATH_SEP:
                current.append('::')
            elif (tok.type != TokenType.STRING_LITERAL and tok.value.isidentifier()
                  and (not current or current[-1] == '::')):
                current.append(tok.value)
            else:
                closed = True
        if current:
            paths.append(''.join(current))
        return paths

    # =========================================================================
    # VISIBILITY
    # =========================================================================

    def parse_visibility(self) -> str:
        """Parse `pub`, `pub(crate)`, `pub(super)`, `pub(self)` or `pub(in path)`."""
        if not self.match(TokenType.PUB):
            return ''
        self.advance()
        if self.match(TokenType.LPAREN) and self.peek(1).type in (
                TokenType.CRATE, TokenType.SUPER, TokenType.SELF_VALUE, TokenType.IN):
            return f'pub({render_tokens(self.skip_group())})'
        return 'pub'

    # =========================================================================
    # ITEM PARSING
    # =========================================================================

    def is_function_start(self) -> bool:
        """Look past `const`/`async`/`unsafe`/`extern "abi"`/`default` for `fn`."""
        i = 0
        while True:
            tok = self.peek(i)
            if tok.type in (TokenType.CONST, TokenType.ASYNC, TokenType.UNSAFE):
                i += 1
            elif tok.type == TokenType.EXTERN:
                i += 1
                if self.peek(i).type == TokenType.STRING_LITERAL:
                    i += 1
            elif tok.type == TokenType.IDENTIFIER and tok.value == 'default':
                i += 1
            else:
                return tok.type == TokenType.FN

    def is_macro_invocation(self) -> bool:
        """Check for `path!` at the current position."""
        i = 0
        if self.peek(i).type == TokenType.PATH_SEP:
            i += 1
        while self.peek(i).type in PATH_SEGMENT_TOKENS:
            if self.peek(i + 1).type == TokenType.PATH_SEP:
                i += 2
                continue
            return self.peek(i + 1).type == TokenType.BANG
        return False

    def parse_item(self) -> Item:
        """Parse a single item with its attributes and visibility."""
        attrs = self.parse_outer_attributes()
        line = self.current().line
        visibility = self.parse_visibility()

        if self.is_function_start():
            return self.parse_function(attrs, visibility, line)
        if self.is_macro_invocation():
            return self.parse_macro_invocation(attrs, line)
        if self.match(TokenType.STRUCT):
            return self.parse_struct(attrs, visibility, line)
        if self.match_ident('union') and self.peek(1).type == TokenType.IDENTIFIER:
            return self.parse_struct(attrs, visibility, line, is_union=True)
        if self.match(TokenType.ENUM):
            return self.parse_enum(attrs, visibility, line)
        if self.match(TokenType.TYPE):
            return self.parse_type_alias(attrs, visibility, line)
        if self.is_trait_start():
            return self.parse_trait(attrs, visibility, line)
        if self.is_impl_start():
            return self.parse_impl(attrs, line)
        if self.match(TokenType.MOD):
            return self.parse_module(attrs, visibility, line)
        if self.match(TokenType.USE):
            self.advance()
            self.skip_until(TokenType.SEMICOLON)
            self.expect(TokenType.SEMICOLON)
            return OtherItem(kind='use', attrs=attrs, visibility=visibility, line=line)
        if self.match(TokenType.EXTERN) and self.peek(1).type == TokenType.CRATE:
            self.advance()
            self.advance()
            name = self.expect_ident('extern crate name')
            self.skip_until(TokenType.SEMICOLON)
            self.expect(TokenType.SEMICOLON)
            return OtherItem(kind='extern crate', name=name, attrs=attrs, visibility=visibility, line=line)
        if self.match(TokenType.EXTERN, TokenType.UNSAFE):
            # extern "C" { ... } block
            self.skip_until(TokenType.LBRACE)
            self.skip_group()
            return OtherItem(kind='extern', attrs=attrs, visibility=visibility, line=line)
        if self.match(TokenType.CONST, TokenType.STATIC):
            kind = self.advance().value
            if self.match(TokenType.MUT):
                self.advance()
            name = self.advance().value
            self.skip_until(TokenType.SEMICOLON)
            self.expect(TokenType.SEMICOLON)
            return OtherItem(kind=kind, name=name, attrs=attrs, visibility=visibility, line=line)

        tok = self.current()
        raise SyntaxError(
            f"Expected item but got {tok.type.name} '{tok.value}' "
            f"at line {tok.line}, column {tok.column}"
        )

    def parse_macro_invocation(self, attrs: List[Attribute], line: int) -> OtherItem:
        """Parse `name! { ... }`, `name!(...);` or `macro_rules! name { ... }`."""
        path_tokens = self.skip_until(TokenType.BANG)
        self.expect(TokenType.BANG)
        name = render_tokens(path_tokens)
        if self.match(TokenType.IDENTIFIER):
            # macro_rules! name
            name = self.advance().value
        brace = self.match(TokenType.LBRACE)
        self.skip_group()
        if self.match(TokenType.SEMICOLON) or not brace:
            self.expect(TokenType.SEMICOLON, 'after macro invocation')
        return OtherItem(kind='macro', name=name, attrs=attrs, line=line)

    def parse_type_alias(self, attrs: List[Attribute], visibility: str, line: int) -> TypeAlias:
        """Parse a type alias or an associated type."""
        self.expect(TokenType.TYPE)
        name = self.expect_ident('type alias name')
        generics = self.parse_generics() if self.match(TokenType.LT) else []
        if self.match(TokenType.COLON):
            self.advance()
            self.parse_bounds()
        self.skip_where_clause()

        ty = None
        if self.match(TokenType.EQ):
            self.advance()
            ty = self.parse_type()
            self.skip_where_clause()
        self.expect(TokenType.SEMICOLON, 'after type alias')
        return TypeAlias(name=name, ty=ty, generics=generics, attrs=attrs,
                         visibility=visibility, line=line)

    def parse_struct(self, attrs: List[Attribute], visibility: str, line: int,
                     is_union: bool = False) -> StructDefinition:
        """Parse a named, tuple or unit struct (or a union)."""
        self.advance()  # struct / union
        name = self.expect_ident('struct name')
        generics = self.parse_generics() if self.match(TokenType.LT) else []
        self.skip_where_clause()

        struct = StructDefinition(name=name, generics=generics, attrs=attrs,
                                  visibility=visibility, is_union=is_union, line=line)
        if self.match(TokenType.SEMICOLON):
            self.advance()
            struct.style = 'unit'
        elif self.match(TokenType.LBRACE):
            struct.fields = self.parse_named_fields()
            struct.style = 'named'
        elif self.match(TokenType.LPAREN):
            struct.fields = self.parse_tuple_fields()
            struct.style = 'tuple'
            self.skip_where_clause()
            self.expect(TokenType.SEMICOLON, 'after tuple struct')
        else:
            tok = self.current()
            raise SyntaxError(
                f"Expected struct body but got {tok.type.name} "
                f"at line {tok.line}, column {tok.column}"
            )
        return struct

    def parse_named_fields(self) -> List[FieldDefinition]:
        """Parse `{ name: Type, ... }`."""
        self.expect(TokenType.LBRACE)
        fields = []
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            attrs = self.parse_outer_attributes()
            line = self.current().line
            visibility = self.parse_visibility()
            name = self.expect_ident('field name')
            self.expect(TokenType.COLON, 'after field name')
            ty = self.parse_type()
            fields.append(FieldDefinition(name=name, ty=ty, attrs=attrs,
                                          visibility=visibility, line=line))
            if self.match(TokenType.COMMA):
                self.advance()
            else:
                break
        self.expect(TokenType.RBRACE)
        return fields

    def parse_tuple_fields(self) -> List[FieldDefinition]:
        """Parse `(Type, pub Type, ...)`."""
        self.expect(TokenType.LPAREN)
        fields = []
        while not self.match(TokenType.RPAREN, TokenType.EOF):
            attrs = self.parse_outer_attributes()
            line = self.current().line
            visibility = self.parse_visibility()
            ty = self.parse_type()
            fields.append(FieldDefinition(name=None, ty=ty, attrs=attrs,
                                          visibility=visibility, line=line))
            if self.match(TokenType.COMMA):
                self.advance()
            else:
                break
        self.expect(TokenType.RPAREN)
        return fields

    def parse_enum(self, attrs: List[Attribute], visibility: str, line: int) -> EnumDefinition:
        """Parse an enum definition."""
        self.expect(TokenType.ENUM)
        name = self.expect_ident('enum name')
        generics = self.parse_generics() if self.match(TokenType.LT) else []
        self.skip_where_clause()
        self.expect(TokenType.LBRACE)

        enum = EnumDefinition(name=name, generics=generics, attrs=attrs,
                              visibility=visibility, line=line)
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            variant_attrs = self.parse_outer_attributes()
            variant_line = self.current().line
            self.parse_visibility()
            variant = VariantDefinition(name=self.expect_ident('variant name'),
                                        attrs=variant_attrs, line=variant_line)
            if self.match(TokenType.LBRACE):
                variant.fields = self.parse_named_fields()
                variant.style = 'named'
            elif self.match(TokenType.LPAREN):
                variant.fields = self.parse_tuple_fields()
                variant.style = 'tuple'
            if self.match(TokenType.EQ):
                self.advance()
                variant.discriminant = render_tokens(self.skip_until(TokenType.COMMA, TokenType.RBRACE))
            enum.variants.append(variant)
            if self.match(TokenType.COMMA):
                self.advance()
            else:
                break

        self.expect(TokenType.RBRACE)
        return enum

    def is_trait_start(self) -> bool:
        i = 0
        while self.peek(i).type == TokenType.UNSAFE or self.match_ident('auto', i):
            i += 1
        return self.peek(i).type == TokenType.TRAIT

    def parse_trait(self, attrs: List[Attribute], visibility: str, line: int) -> TraitDefinition:
        """Parse a trait definition with its method declarations."""
        while not self.match(TokenType.TRAIT):
            self.advance()  # unsafe / auto
        self.expect(TokenType.TRAIT)
        name = self.expect_ident('trait name')
        generics = self.parse_generics() if self.match(TokenType.LT) else []

        supertraits = []
        if self.match(TokenType.COLON):
            self.advance()
            supertraits = self.parse_bounds()
        self.skip_where_clause()

        trait = TraitDefinition(name=name, generics=generics, supertraits=supertraits,
                                attrs=attrs, visibility=visibility, line=line)
        if self.match(TokenType.EQ):
            # Trait alias: trait A = B + C;
            self.skip_until(TokenType.SEMICOLON)
            self.expect(TokenType.SEMICOLON)
            return trait

        self.expect(TokenType.LBRACE)
        trait.attrs = attrs + self.parse_inner_attributes()
        trait.methods = self.parse_associated_items()
        self.expect(TokenType.RBRACE)
        return trait

    def is_impl_start(self) -> bool:
        i = 0
        while self.peek(i).type == TokenType.UNSAFE or self.match_ident('default', i):
            i += 1
        return self.peek(i).type == TokenType.IMPL

    def parse_impl(self, attrs: List[Attribute], line: int) -> ImplDefinition:
        """Parse an inherent or trait implementation block."""
        while not self.match(TokenType.IMPL):
            self.advance()  # unsafe / default
        self.expect(TokenType.IMPL)
        generics = self.parse_generics() if self.match(TokenType.LT) else []

        if self.match(TokenType.CONST):
            self.advance()
        negative = False
        if self.match(TokenType.BANG):
            self.advance()
            negative = True

        first = self.parse_type()
        trait_path = None
        if self.match(TokenType.FOR):
            self.advance()
            if not isinstance(first, PathType):
                raise SyntaxError(f"Expected a trait path in impl at line {line}")
            trait_path = first
            self_ty = self.parse_type()
        else:
            self_ty = first
        self.skip_where_clause()

        impl = ImplDefinition(self_ty=self_ty, trait_path=trait_path, negative=negative,
                              generics=generics, attrs=attrs, line=line)
        self.expect(TokenType.LBRACE)
        impl.attrs = attrs + self.parse_inner_attributes()
        impl.methods = self.parse_associated_items()
        self.expect(TokenType.RBRACE)
        return impl

    def parse_associated_items(self) -> List[FunctionDefinition]:
        """Parse the members of a trait or impl body, keeping only functions."""
        methods = []
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            if self.match(TokenType.SEMICOLON):
                self.advance()
                continue
            attrs = self.parse_outer_attributes()
            line = self.current().line
            visibility = self.parse_visibility()

            if self.is_function_start():
                methods.append(self.parse_function(attrs, visibility, line))
            elif self.match(TokenType.TYPE):
                self.parse_type_alias(attrs, visibility, line)
            elif self.match(TokenType.CONST):
                self.skip_until(TokenType.SEMICOLON)
                self.expect(TokenType.SEMICOLON)
            elif self.is_macro_invocation():
                self.parse_macro_invocation(attrs, line)
            else:
                tok = self.current()
                raise SyntaxError(
                    f"Expected associated item but got {tok.type.name} '{tok.value}' "
                    f"at line {tok.line}, column {tok.column}"
                )
        return methods

    def parse_module(self, attrs: List[Attribute], visibility: str, line: int) -> ModuleDefinition:
        """Parse `mod name;` or `mod name { ... }`."""
        self.expect(TokenType.MOD)
        name = self.expect_ident('module name')
        module = ModuleDefinition(name=name, attrs=attrs, visibility=visibility, line=line)
        if self.match(TokenType.SEMICOLON):
            self.advance()
            return module
        inner, module.items = self.parse_items_block()
        module.attrs = attrs + inner
        return module

    # =========================================================================
    # FUNCTION PARSING
    # =========================================================================

    def parse_function(self, attrs: List[Attribute], visibility: str, line: int) -> FunctionDefinition:
        """Parse a function or method, skipping its body."""
        sig = Signature(name='')
        while not self.match(TokenType.FN):
            tok = self.advance()
            if tok.type == TokenType.CONST:
                sig.is_const = True
            elif tok.type == TokenType.ASYNC:
                sig.is_async = True
            elif tok.type == TokenType.UNSAFE:
                sig.is_unsafe = True
            elif tok.type == TokenType.EXTERN and self.match(TokenType.STRING_LITERAL):
                self.advance()
        self.expect(TokenType.FN)

        sig.name = self.expect_ident('function name')
        if self.match(TokenType.LT):
            sig.generics = self.parse_generics()
        sig.receiver, sig.params = self.parse_function_parameters()

        if self.match(TokenType.ARROW):
            self.advance()
            sig.output = self.parse_type()
        self.skip_where_clause()

        has_body = True
        if self.match(TokenType.LBRACE):
            self.skip_group()
        else:
            self.expect(TokenType.SEMICOLON, f'after signature of {sig.name}')
            has_body = False

        return FunctionDefinition(sig=sig, has_body=has_body, attrs=attrs,
                                  visibility=visibility, line=line)

    def parse_function_parameters(self) -> Tuple[Optional[Receiver], List[Parameter]]:
        """Parse `(receiver?, name: Type, ...)`."""
        self.expect(TokenType.LPAREN)
        receiver = None
        params = []
        first = True
        while not self.match(TokenType.RPAREN, TokenType.EOF):
            attrs = self.parse_outer_attributes()
            if first and self.is_receiver():
                receiver = self.parse_receiver()
            elif self.match(TokenType.DOT):
                # C variadic `...`
                self.skip_until(TokenType.COMMA, TokenType.RPAREN)
            else:
                params.append(self.parse_parameter(attrs))
            first = False
            if self.match(TokenType.COMMA):
                self.advance()
            else:
                break
        self.expect(TokenType.RPAREN)
        return receiver, params

    def is_receiver(self) -> bool:
        i = 0
        if self.peek(i).type == TokenType.AMPERSAND:
            i += 1
            if self.peek(i).type == TokenType.LIFETIME:
                i += 1
        if self.peek(i).type == TokenType.MUT:
            i += 1
        return self.peek(i).type == TokenType.SELF_VALUE and self.peek(i + 1).type != TokenType.PATH_SEP

    def parse_receiver(self) -> Receiver:
        """Parse `self`, `mut self`, `&self`, `&'a mut self` or `self: Type`."""
        receiver = Receiver()
        if self.match(TokenType.AMPERSAND):
            self.advance()
            receiver.reference = True
            if self.match(TokenType.LIFETIME):
                receiver.lifetime = self.advance().value
        if self.match(TokenType.MUT):
            self.advance()
            receiver.mutable = True
        self.expect(TokenType.SELF_VALUE)

        if self.match(TokenType.COLON):
            self.advance()
            receiver.ty = self.parse_type()
            if isinstance(receiver.ty, ReferenceType):
                receiver.reference = True
                receiver.mutable = receiver.ty.mutable
        return receiver

    def parse_parameter(self, attrs: List[Attribute]) -> Parameter:
        """Parse `pattern: Type`."""
        pattern_tokens = self.skip_until(TokenType.COLON)
        self.expect(TokenType.COLON, 'in parameter')
        ty = self.parse_type()

        name = None
        binding = [t for t in pattern_tokens if t.type not in (TokenType.MUT, TokenType.REF)]
        if len(binding) == 1 and binding[0].type == TokenType.IDENTIFIER and binding[0].value != '_':
            name = binding[0].value
        return Parameter(name=name, ty=ty, pattern=render_tokens(pattern_tokens), attrs=attrs)

    # =========================================================================
    # GENERICS AND BOUNDS
    # =========================================================================

    def parse_generics(self) -> List[str]:
        """Parse `<'a, T: Bound, const N: usize>` and return the type/const parameter names."""
        self.expect(TokenType.LT)
        names = []
        depth = 1
        expecting_param = True
        while depth > 0:
            tok = self.current()
            if tok.type == TokenType.EOF:
                raise SyntaxError("Unclosed generic parameter list")
            if tok.type in OPENING_DELIMITERS:
                self.skip_group()
                expecting_param = False
                continue
            if tok.type == TokenType.LT:
                depth += 1
            elif tok.type == TokenType.GT:
                depth -= 1
            elif tok.type == TokenType.COMMA and depth == 1:
                expecting_param = True
                self.advance()
                continue
            elif expecting_param and depth == 1:
                if tok.type == TokenType.IDENTIFIER:
                    names.append(tok.value)
                elif tok.type == TokenType.CONST and self.peek(1).type == TokenType.IDENTIFIER:
                    names.append(self.peek(1).value)
                expecting_param = False
            self.advance()
        return names

    def parse_bounds(self) -> List[str]:
        """Parse `Bound + 'a + ?Sized + for<'b> Fn(&'b u8)` and return the bound names."""
        names = []
        while True:
            if self.match(TokenType.LIFETIME):
                self.advance()
            elif self.match(TokenType.LPAREN):
                self.skip_group()
            else:
                if self.match(TokenType.QUESTION, TokenType.TILDE):
                    self.advance()
                    if self.match(TokenType.CONST):
                        self.advance()
                if self.match(TokenType.FOR):
                    self.advance()
                    self.parse_generics()
                names.append(self.parse_path_type().name)
            if self.match(TokenType.PLUS):
                self.advance()
                continue
            break
        return names

    def skip_where_clause(self) -> None:
        if self.match(TokenType.WHERE):
            self.advance()
            self.skip_until(TokenType.LBRACE, TokenType.SEMICOLON)

    # =========================================================================
    # TYPE PARSING
    # =========================================================================

    def parse_type(self) -> TypeExpr:
        """Parse a type expression.

        Paths, tuples, references, arrays and slices are parsed structurally;
        other shapes become RawType nodes holding their source text.
        """
        start = self.pos
        tok = self.current()

        if tok.type == TokenType.LPAREN:
            return self.parse_tuple_type()
        if tok.type == TokenType.LBRACKET:
            return self.parse_array_type()
        if tok.type == TokenType.AMPERSAND:
            self.advance()
            lifetime = self.advance().value if self.match(TokenType.LIFETIME) else None
            mutable = False
            if self.match(TokenType.MUT):
                self.advance()
                mutable = True
            return ReferenceType(elem=self.parse_type(), mutable=mutable, lifetime=lifetime)

        if tok.type == TokenType.STAR:
            # Raw pointer
            self.advance()
            if self.match(TokenType.CONST, TokenType.MUT):
                self.advance()
            self.parse_type()
        elif tok.type == TokenType.BANG or (tok.type == TokenType.IDENTIFIER and tok.value == '_'):
            self.advance()
        elif tok.type in (TokenType.IMPL, TokenType.DYN):
            self.advance()
            self.parse_bounds()
        elif tok.type in (TokenType.FN, TokenType.UNSAFE, TokenType.EXTERN):
            self.parse_fn_pointer()
        elif tok.type == TokenType.FOR:
            self.advance()
            self.parse_generics()
            self.parse_type()
        elif tok.type == TokenType.LT:
            self.parse_qualified_path()
        elif tok.type in PATH_SEGMENT_TOKENS or tok.type == TokenType.PATH_SEP:
            path = self.parse_path_type()
            if not self.match(TokenType.BANG):
                return path
            # Macro in type position
            self.advance()
            self.skip_group()
        else:
            raise SyntaxError(
                f"Expected type but got {tok.type.name} '{tok.value}' "
                f"at line {tok.line}, column {tok.column}"
            )

        return RawType(text=render_tokens(self.tokens[start:self.pos]))

    def parse_tuple_type(self) -> TypeExpr:
        """Parse `()`, `(T,)`, `(A, B)` or a parenthesized type `(T)`."""
        self.expect(TokenType.LPAREN)
        elems = []
        trailing_comma = False
        while not self.match(TokenType.RPAREN, TokenType.EOF):
            elems.append(self.parse_type())
            trailing_comma = self.match(TokenType.COMMA)
            if trailing_comma:
                self.advance()
            else:
                break
        self.expect(TokenType.RPAREN, 'in tuple type')
        if len(elems) == 1 and not trailing_comma:
            return elems[0]
        return TupleType(elems=elems)

    def parse_array_type(self) -> ArrayType:
        """Parse `[T; N]` or `[T]`."""
        self.expect(TokenType.LBRACKET)
        elem = self.parse_type()
        length = None
        if self.match(TokenType.SEMICOLON):
            self.advance()
            length = render_tokens(self.skip_until(TokenType.RBRACKET))
        self.expect(TokenType.RBRACKET, 'in array type')
        return ArrayType(elem=elem, length=length)

    def parse_fn_pointer(self) -> None:
        """Skip `unsafe extern "C" fn(A, B) -> R`."""
        while not self.match(TokenType.FN):
            tok = self.advance()
            if tok.type not in (TokenType.UNSAFE, TokenType.EXTERN, TokenType.STRING_LITERAL):
                raise SyntaxError(f"Malformed function pointer type at line {tok.line}")
        self.expect(TokenType.FN)
        self.skip_group()
        if self.match(TokenType.ARROW):
            self.advance()
            self.parse_type()

    def parse_qualified_path(self) -> None:
        """Skip `<T as Trait>::Assoc`."""
        self.expect(TokenType.LT)
        self.parse_type()
        if self.match(TokenType.AS):
            self.advance()
            self.parse_path_type()
        self.expect(TokenType.GT, 'in qualified path')
        while self.match(TokenType.PATH_SEP):
            self.advance()
            self.expect_ident('in qualified path')
            if self.match(TokenType.LT):
                self.parse_generic_args()

    def parse_path_type(self) -> PathType:
        """Parse a path with generic arguments, e.g. `std::collections::HashMap<K, V>`."""
        path = PathType()
        if self.match(TokenType.PATH_SEP):
            self.advance()
        while True:
            tok = self.advance()
            if tok.type not in PATH_SEGMENT_TOKENS:
                raise SyntaxError(
                    f"Expected path segment but got {tok.type.name} '{tok.value}' "
                    f"at line {tok.line}, column {tok.column}"
                )
            segment = PathSegment(name=tok.value)

            # Turbofish
            if self.match(TokenType.PATH_SEP) and self.peek(1).type == TokenType.LT:
                self.advance()
            if self.match(TokenType.LT):
                segment.args = self.parse_generic_args()
            elif self.match(TokenType.LPAREN):
                # Fn(A, B) -> C sugar
                inner = self.parse_tuple_type()
                segment.args = inner.elems if isinstance(inner, TupleType) else [inner]
                if self.match(TokenType.ARROW):
                    self.advance()
                    segment.args.append(self.parse_type())
            path.segments.append(segment)

            if self.match(TokenType.PATH_SEP) and self.peek(1).type in PATH_SEGMENT_TOKENS:
                self.advance()
                continue
            break
        return path

    def parse_generic_args(self) -> List[TypeExpr]:
        """Parse `<T, 'a, N, Item = U>` and return the type arguments only."""
        self.expect(TokenType.LT)
        args = []
        while not self.match(TokenType.GT, TokenType.EOF):
            if self.match(TokenType.LIFETIME):
                self.advance()
            elif self.match(TokenType.IDENTIFIER) and self.peek(1).type == TokenType.EQ:
                # Associated type binding
                self.advance()
                self.advance()
                self.parse_type()
            elif self.match(TokenType.IDENTIFIER) and self.peek(1).type == TokenType.COLON:
                # Associated type constraint
                self.advance()
                self.advance()
                self.parse_bounds()
            elif self.match(TokenType.LBRACE):
                self.skip_group()
            elif self.match(TokenType.NUMBER, TokenType.STRING_LITERAL, TokenType.CHAR_LITERAL,
                            TokenType.TRUE, TokenType.FALSE):
                self.advance()
            elif self.match(TokenType.MINUS) and self.peek(1).type == TokenType.NUMBER:
                self.advance()
                self.advance()
            else:
                args.append(self.parse_type())

            if self.match(TokenType.COMMA):
                self.advance()
            elif not self.match(TokenType.GT):
                tok = self.current()
                raise SyntaxError(
                    f"Expected ',' or '>' but got {tok.type.name} '{tok.value}' "
                    f"at line {tok.line}, column {tok.column}"
                )
        self.expect(TokenType.GT, 'closing generic arguments')
        return args
