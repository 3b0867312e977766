"""Lexer for the string form of typed property values."""

import ply.lex as lex


class PropertyLexer:
    """Lexer splitting a property string into runs of bits, blanks and text.

    Runs are maximal, so two consecutive tokens never share a type. That
    makes the token type sequence enough to tell a bit vector from a
    string.
    """

    tokens = [
        "BITS",
        "BLANK",
        "TEXT",
    ]

    t_BITS = r"[01xz]+"
    t_BLANK = r"[ ]+"
    t_TEXT = r"[^01xz ]+"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens

    def token_types(self, data: str) -> list[str]:
        """Return the sequence of token types for ``data``."""
        return [tok.type for tok in self.tokenize(data)]

    def is_bit_vector(self, data: str) -> bool:
        """True if ``data`` consists of bit characters only (or is empty)."""
        return self.token_types(data) in ([], ["BITS"])

    def is_padded_bits(self, data: str) -> bool:
        """True if ``data`` is optional bits followed only by blanks."""
        return self.token_types(data) in (["BLANK"], ["BITS", "BLANK"])
