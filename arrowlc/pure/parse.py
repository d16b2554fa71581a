"""Tokenization and parenthesis matching for arrow-syntax lambda calculus programs.

The lexer turns program text into a flat list of Tokens, and the parser groups those tokens into a generic tree of
parentheses. Neither of them knows what a λ-term is: deciding whether `(x -> y)` is an abstraction and `(x y)` an
application is left to LambdaTerm.generate_tree in pure/lexical.py.

Tokens:

```
<name>  ::= "a" | "b" | ... | "z"   ; names are always a single character, so "xy" lexes as two names
<arrow> ::= "->"
<colon> ::= ":"
<open>  ::= "("
<close> ::= ")"
```
"""

from arrowlc.lang.error import LexError, ParseError


class Token:
    """Single lexical unit of a program."""
    NAME = "name"
    ARROW = "arrow"
    COLON = "colon"
    OPEN = "open"
    CLOSE = "close"

    SYMBOLS = {ARROW: "->", COLON: ":", OPEN: "(", CLOSE: ")"}

    def __init__(self, kind, char=None):
        self.kind = kind
        self.char = char  # only set for names

    def __repr__(self):
        if self.kind == Token.NAME:
            return f"Token('{self.kind}', '{self.char}')"
        return f"Token('{self.kind}')"

    def __str__(self):
        return self.char if self.kind == Token.NAME else Token.SYMBOLS[self.kind]

    def __eq__(self, other):
        return isinstance(other, Token) and (self.kind, self.char) == (other.kind, other.char)

    def __hash__(self):
        return hash((self.kind, self.char))


WHITESPACE = " \n"
SINGLES = {"(": Token.OPEN, ")": Token.CLOSE, ":": Token.COLON}


def lex(expr):
    """Returns the list of Tokens in expr. Raises LexError on the first invalid character."""
    tokens = []
    arrow_start = None  # position of a '-' still waiting for its '>'

    for idx, char in enumerate(expr):
        if arrow_start is not None:
            if char != ">":
                raise LexError("'-' must be followed by '>'", expr, start=arrow_start, end=idx + 1)
            tokens.append(Token(Token.ARROW))
            arrow_start = None

        elif char in WHITESPACE:
            continue
        elif "a" <= char <= "z":
            tokens.append(Token(Token.NAME, char))
        elif char in SINGLES:
            tokens.append(Token(SINGLES[char]))
        elif char == "-":
            arrow_start = idx
        elif char == ">":
            raise LexError("'>' must be preceded by '-'", expr, start=idx, end=idx + 1)
        else:
            raise LexError(f"'{char}' is never a valid character", expr, start=idx, end=idx + 1)

    if arrow_start is not None:
        raise LexError("'-' must be followed by '>'", expr, start=arrow_start, end=arrow_start + 1)

    return tokens


class Node:
    """Superclass of parse tree nodes. Parse tree nodes only record parenthesization: they have no meaning yet."""

    def __repr__(self):
        return f"{type(self).__name__}('{self}')"


class Name(Node):
    """Name appearing in a program."""

    def __init__(self, char):
        self.char = char

    def __str__(self):
        return self.char

    def __eq__(self, other):
        return isinstance(other, Name) and self.char == other.char

    def __hash__(self):
        return hash(self.char)


class Marker(Node):
    """Arrow or colon. There are only ever two Markers: ARROW and COLON."""

    def __init__(self, symbol):
        self.symbol = symbol

    def __str__(self):
        return self.symbol


class Branch(Node):
    """Parenthesized list of nodes."""

    def __init__(self, nodes=None):
        self.nodes = nodes if nodes is not None else []

    def __str__(self):
        return "(" + " ".join(str(node) for node in self.nodes) + ")"

    def __eq__(self, other):
        return isinstance(other, Branch) and self.nodes == other.nodes

    def __hash__(self):
        return hash(tuple(self.nodes))


ARROW = Marker("->")
COLON = Marker(":")

LEAVES = {Token.ARROW: ARROW, Token.COLON: COLON}


def parse(tokens):
    """Groups tokens into a single parse tree and returns its root. Raises ParseError if tokens cannot start a program.

    Matching is lenient about the end of the program: tokens following a complete top-level branch are added to that
    branch (so `(x y) z` reads as `(x y z)` and is rejected during construction), a closing parenthesis with nothing
    left to close ends the program, and parentheses still open at the end of input are closed implicitly.
    """
    if not tokens:
        raise ParseError("Empty program!")

    first = tokens[0]
    if first.kind == Token.CLOSE:
        raise ParseError("Closing parenthesis is invalid at start of program")
    elif first.kind == Token.ARROW:
        raise ParseError("Missing lambda parameter before arrow")
    elif first.kind == Token.COLON:
        raise ParseError("Missing name before colon")

    root = None
    stack = []  # open branches, innermost last

    for token in tokens:
        if token.kind == Token.CLOSE:
            if not stack:
                break
            stack.pop()
            continue

        if isinstance(root, Name):  # a bare name can't be followed by anything
            if token.kind == Token.OPEN:
                raise ParseError("Unexpected parenthesis")
            raise ParseError("Missing parentheses")

        if token.kind == Token.OPEN:
            node = Branch()
        elif token.kind == Token.NAME:
            node = Name(token.char)
        else:
            node = LEAVES[token.kind]

        parent = stack[-1] if stack else root
        if parent is None:
            root = node
        else:
            parent.nodes.append(node)

        if token.kind == Token.OPEN:
            stack.append(node)

    return root
