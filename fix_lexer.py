from enum import Enum, unique
from typing import Iterator, List, Optional, Tuple
from collections import namedtuple


@unique
class TokenType(Enum):
    FRAGMENT = -1  # opaque operand text
    SYMBOL = -2  # single punctuation character


@unique
class Adjacency(Enum):
    TIGHT = 0  # glued to the next symbol character
    LOOSE = 1  # followed by trivia, a non-symbol, or the end of input


Token = namedtuple(typename="Token", field_names=["type", "value", "adjacency"], defaults=[None])


SYMBOL_CHARS = frozenset("!$%&*+-./:<=>?@\\^|~,;")
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = frozenset(OPENERS.values())
QUOTES = frozenset("'\"")


class LexError(Exception):
    pass


class Lexer:
    """ Lexer that splits source code into fragment and symbol tokens. """

    def __init__(self, source_code: str):
        self.source_code = source_code
        self.last_char = source_code[0] if source_code else ""
        self.pos = 0  # index of last_char on source_code

    def __advance_last_char(self):
        self.pos += 1
        try:
            self.last_char = self.source_code[self.pos]
        except IndexError:
            self.last_char = ""

    def __peek_char(self) -> str:
        if self.pos + 1 < len(self.source_code):
            return self.source_code[self.pos + 1]
        return ""

    def tokens(self) -> Iterator[Token]:
        while self.last_char:
            # Skip any whitespace
            if self.last_char.isspace():
                self.__advance_last_char()

            # Comment (until end of line): #.*\n
            elif self.last_char == "#":
                while self.last_char and self.last_char not in "\r\n":
                    self.__advance_last_char()

            # Name: [_a-zA-Z][_a-zA-Z0-9]*(\.[_a-zA-Z][_a-zA-Z0-9]*)*
            elif self.last_char.isalpha() or self.last_char == "_":
                yield Token(TokenType.FRAGMENT, value=self.__read_name())

            # Number: [0-9][0-9._]*
            elif self.last_char.isdigit():
                start = self.pos
                while self.last_char and (self.last_char.isdigit() or self.last_char in "._"):
                    self.__advance_last_char()
                yield Token(TokenType.FRAGMENT, value=self.source_code[start : self.pos])

            elif self.last_char in QUOTES:
                start = self.pos
                self.__skip_string()
                yield Token(TokenType.FRAGMENT, value=self.source_code[start : self.pos])

            elif self.last_char in OPENERS:
                yield Token(TokenType.FRAGMENT, value=self.__read_group())

            elif self.last_char in CLOSERS:
                raise LexError(f"Unbalanced '{self.last_char}' at position {self.pos}")

            elif self.last_char in SYMBOL_CHARS:
                # NOTE only a following symbol character makes a symbol tight,
                # so the `+` in `a+b` ends its run just like the one in `a + b`
                if self.__peek_char() in SYMBOL_CHARS:
                    adjacency = Adjacency.TIGHT
                else:
                    adjacency = Adjacency.LOOSE
                yield Token(TokenType.SYMBOL, value=self.last_char, adjacency=adjacency)
                self.__advance_last_char()

            else:
                raise LexError(f"Unexpected character '{self.last_char}' at position {self.pos}")

    def __read_name(self) -> str:
        start = self.pos
        while True:
            while self.last_char.isalnum() or self.last_char == "_":
                self.__advance_last_char()
            # Dotted names, like `operator.add`, are kept as a single fragment
            next_char = self.__peek_char()
            if self.last_char == "." and (next_char.isalpha() or next_char == "_"):
                self.__advance_last_char()
                continue
            return self.source_code[start : self.pos]

    def __skip_string(self):
        quote, start = self.last_char, self.pos
        self.__advance_last_char()
        while self.last_char and self.last_char != quote:
            if self.last_char == "\\":
                self.__advance_last_char()
            self.__advance_last_char()
        if not self.last_char:
            raise LexError(f"Unterminated string starting at position {start}")
        self.__advance_last_char()  # closing quote

    def __read_group(self) -> str:
        start = self.pos
        expected = [OPENERS[self.last_char]]
        self.__advance_last_char()
        while expected:
            if not self.last_char:
                raise LexError(f"Unclosed '{self.source_code[start]}' at position {start}")
            if self.last_char in QUOTES:
                self.__skip_string()
                continue
            if self.last_char in OPENERS:
                expected.append(OPENERS[self.last_char])
            elif self.last_char in CLOSERS:
                if self.last_char != (closer := expected.pop()):
                    raise LexError(
                        f"Expected '{closer}' but got '{self.last_char}' at position {self.pos}"
                    )
            self.__advance_last_char()
        return self.source_code[start : self.pos]


def tokenize(source_code: str) -> List[Token]:
    return list(Lexer(source_code).tokens())


def group_body(token: Token) -> Optional[str]:
    """ Returns the text inside a parenthesized group token, or `None` for any other token. """
    if token.type == TokenType.FRAGMENT and token.value.startswith("("):
        return token.value[1:-1]
    return None


def split_lambda(tokens: List[Token]) -> Optional[Tuple[List[Token], List[Token]]]:
    """ Split `lambda <params>: <body>` at its first top-level `:`.

        Returns the parameter and body tokens, or `None` when `tokens` is not a lambda.
    """
    if not tokens or tokens[0] != Token(TokenType.FRAGMENT, "lambda"):
        return None
    for i, tok in enumerate(tokens):
        if tok.type == TokenType.SYMBOL and tok.value == ":":
            return tokens[1:i], tokens[i + 1 :]
    return None
