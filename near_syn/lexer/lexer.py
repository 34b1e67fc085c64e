"""
Lexer implementation for Rust source code.

The Lexer tokenizes Rust source code into a stream of tokens that can be
consumed by the parser. Regular comments are discarded; doc comments are
kept as OUTER_DOC/INNER_DOC tokens since they carry documentation.
"""

from typing import List

from .tokens import Token, TokenType, KEYWORDS, TWO_CHAR_OPS, SINGLE_CHAR_OPS


ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '\\': '\\',
    '0': '\0',
    "'": "'",
    '"': '"',
}


class Lexer:
    """
    Lexer for Rust source code.

    Converts source text into a list of tokens for parsing.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def peek(self, offset: int = 0) -> str:
        """Look ahead in the source without consuming."""
        pos = self.pos + offset
        if pos >= len(self.source):
            return ''
        return self.source[pos]

    def advance(self) -> str:
        """Consume and return the current character."""
        ch = self.peek()
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def error(self, message: str) -> SyntaxError:
        return SyntaxError(f'{message} at line {self.line}, column {self.column}')

    def skip_whitespace(self) -> None:
        """Skip over whitespace characters."""
        ch = self.peek()
        while ch and ch.isspace():
            self.advance()
            ch = self.peek()

    def skip_shebang(self) -> None:
        """Skip a leading `#!` interpreter line (but not an inner attribute `#![`)."""
        if self.source.startswith('#!') and not self.source[2:].lstrip().startswith('['):
            while self.peek() and self.peek() != '\n':
                self.advance()

    def read_line_comment(self, start_line: int, start_col: int) -> None:
        """Read a `//` comment, emitting a doc token for `///` and `//!`."""
        self.advance()  # /
        self.advance()  # /
        token_type = None
        if self.peek() == '/' and self.peek(1) != '/':
            token_type = TokenType.OUTER_DOC
            self.advance()
        elif self.peek() == '!':
            token_type = TokenType.INNER_DOC
            self.advance()

        text = ''
        while self.peek() and self.peek() != '\n':
            text += self.advance()

        if token_type:
            self.tokens.append(Token(token_type, text.rstrip('\r'), start_line, start_col))

    def read_block_comment(self, start_line: int, start_col: int) -> None:
        """Read a (possibly nested) `/* */` comment, emitting doc tokens for `/** */` and `/*! */`."""
        self.advance()  # /
        self.advance()  # *
        token_type = None
        if self.peek() == '*' and self.peek(1) not in ('*', '/'):
            token_type = TokenType.OUTER_DOC
            self.advance()
        elif self.peek() == '!':
            token_type = TokenType.INNER_DOC
            self.advance()

        text = ''
        depth = 1
        while depth > 0:
            if not self.peek():
                raise SyntaxError(f'Unterminated block comment starting at line {start_line}, column {start_col}')
            if self.peek() == '/' and self.peek(1) == '*':
                depth += 1
                text += self.advance() + self.advance()
            elif self.peek() == '*' and self.peek(1) == '/':
                depth -= 1
                self.advance()
                self.advance()
                if depth > 0:
                    text += '*/'
            else:
                text += self.advance()

        if token_type:
            self.tokens.append(Token(token_type, text, start_line, start_col))

    def read_string(self) -> str:
        """Read a quoted string literal and return its unescaped contents."""
        start_line = self.line
        self.advance()  # opening quote
        result = ''
        while True:
            ch = self.peek()
            if not ch:
                raise SyntaxError(f'Unterminated string literal starting at line {start_line}')
            if ch == '"':
                self.advance()
                return result
            if ch == '\\':
                self.advance()
                result += self.read_escape()
            else:
                result += self.advance()

    def read_escape(self) -> str:
        """Decode the escape sequence following a backslash."""
        ch = self.advance()
        if ch in ESCAPES:
            return ESCAPES[ch]
        if ch == 'x':
            return chr(int(self.advance() + self.advance(), 16))
        if ch == 'u':
            if self.advance() != '{':
                raise self.error('Malformed unicode escape')
            digits = ''
            while self.peek() and self.peek() != '}':
                digits += self.advance()
            self.advance()  # }
            return chr(int(digits.replace('_', ''), 16))
        if ch == '\n':
            # Line continuation: skip the newline and leading whitespace
            self.skip_whitespace()
            return ''
        raise self.error(f'Unknown character escape: \\{ch}')

    def read_raw_string(self) -> str:
        """Read a raw string literal `r#"..."#`, positioned at the `r`."""
        start_line = self.line
        self.advance()  # r
        hashes = 0
        while self.peek() == '#':
            hashes += 1
            self.advance()
        if self.peek() != '"':
            raise self.error('Malformed raw string literal')
        self.advance()
        terminator = '"' + '#' * hashes
        result = ''
        while not self.source.startswith(terminator, self.pos):
            if not self.peek():
                raise SyntaxError(f'Unterminated raw string literal starting at line {start_line}')
            result += self.advance()
        for _ in terminator:
            self.advance()
        return result

    def read_char_or_lifetime(self, start_line: int, start_col: int) -> None:
        """Disambiguate `'a` (lifetime) from `'a'` (char literal)."""
        nxt = self.peek(1)
        if nxt != '\\' and self.peek(2) != "'" and (nxt.isalpha() or nxt == '_'):
            self.advance()  # '
            name = self.read_identifier()
            self.tokens.append(Token(TokenType.LIFETIME, "'" + name, start_line, start_col))
            return

        text = self.advance()  # '
        while self.peek() and self.peek() != "'":
            if self.peek() == '\\':
                text += self.advance()
            text += self.advance()
        if not self.peek():
            raise SyntaxError(f'Unterminated character literal at line {start_line}, column {start_col}')
        text += self.advance()
        self.tokens.append(Token(TokenType.CHAR_LITERAL, text, start_line, start_col))

    def read_number(self) -> str:
        """Read a numeric literal, including any base prefix and type suffix."""
        result = ''
        if self.peek() == '0' and self.peek(1) in ('x', 'o', 'b'):
            result += self.advance() + self.advance()
            while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
                result += self.advance()
            return result

        while self.peek() and (self.peek().isdigit() or self.peek() == '_'):
            result += self.advance()
        # A dot only continues the number when a digit follows (`1..2`, `x.0.foo()`)
        if self.peek() == '.' and self.peek(1).isdigit():
            result += self.advance()
            while self.peek() and (self.peek().isdigit() or self.peek() == '_'):
                result += self.advance()
        if self.peek() in ('e', 'E') and (self.peek(1).isdigit() or self.peek(1) in ('+', '-')):
            result += self.advance()
            if self.peek() in ('+', '-'):
                result += self.advance()
            while self.peek() and (self.peek().isdigit() or self.peek() == '_'):
                result += self.advance()
        # Type suffix such as u64 or f32
        while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
            result += self.advance()
        return result

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        result = ''
        while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
            result += self.advance()
        return result

    def read_prefixed_literal(self, start_line: int, start_col: int) -> bool:
        """Handle `b"..."`, `br"..."`, `r"..."`, `c"..."`, `b'x'` and `r#ident` forms.

        Returns True if a token was produced.
        """
        ch = self.peek()
        nxt = self.peek(1)

        if ch in ('b', 'c') and nxt == '"':
            self.advance()
            value = self.read_string()
        elif ch in ('b', 'c') and nxt == 'r' and self.peek(2) in ('"', '#'):
            self.advance()
            value = self.read_raw_string()
        elif ch == 'r' and (nxt == '"' or (nxt == '#' and self.peek(2) in ('"', '#'))):
            value = self.read_raw_string()
        elif ch == 'r' and nxt == '#' and (self.peek(2).isalpha() or self.peek(2) == '_'):
            self.advance()  # r
            self.advance()  # #
            value = self.read_identifier()
            self.tokens.append(Token(TokenType.IDENTIFIER, value, start_line, start_col))
            return True
        elif ch == 'b' and nxt == "'":
            self.advance()
            self.read_char_or_lifetime(start_line, start_col)
            return True
        else:
            return False

        self.tokens.append(Token(TokenType.STRING_LITERAL, value, start_line, start_col))
        return True

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source and return a list of tokens.

        Returns:
            List of Token objects, ending with an EOF token.

        Raises:
            SyntaxError: on unterminated literals/comments or unknown characters.
        """
        self.skip_shebang()

        while self.pos < len(self.source):
            self.skip_whitespace()

            if self.pos >= len(self.source):
                break

            start_line = self.line
            start_col = self.column
            ch = self.peek()

            # Comments
            if ch == '/' and self.peek(1) == '/':
                self.read_line_comment(start_line, start_col)
                continue
            if ch == '/' and self.peek(1) == '*':
                self.read_block_comment(start_line, start_col)
                continue

            # String literals
            if ch == '"':
                value = self.read_string()
                self.tokens.append(Token(TokenType.STRING_LITERAL, value, start_line, start_col))
                continue

            if ch == "'":
                self.read_char_or_lifetime(start_line, start_col)
                continue

            # Numbers
            if ch.isdigit():
                value = self.read_number()
                self.tokens.append(Token(TokenType.NUMBER, value, start_line, start_col))
                continue

            # Identifiers and keywords
            if ch.isalpha() or ch == '_':
                if ch in ('b', 'c', 'r') and self.read_prefixed_literal(start_line, start_col):
                    continue
                value = self.read_identifier()
                token_type = KEYWORDS.get(value, TokenType.IDENTIFIER)
                self.tokens.append(Token(token_type, value, start_line, start_col))
                continue

            # Two-character punctuation
            two_char = ch + self.peek(1)
            if two_char in TWO_CHAR_OPS:
                self.advance()
                self.advance()
                self.tokens.append(Token(TWO_CHAR_OPS[two_char], two_char, start_line, start_col))
                continue

            # Single-character punctuation and delimiters
            if ch in SINGLE_CHAR_OPS:
                self.advance()
                self.tokens.append(Token(SINGLE_CHAR_OPS[ch], ch, start_line, start_col))
                continue

            raise self.error(f'Unexpected character {ch!r}')

        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column))
        return self.tokens
