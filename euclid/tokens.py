"""
Turning text into token sequences.

Tokens are whitespace-separated words. Scope markers are ordinary tokens,
so they must be spaced out too:

    tokenize("{ a } plus { b }")  -> ["{", "a", "}", "plus", "{", "b", "}"]
    parse_equation("1 + 1 = 2")  -> (["1", "+", "1"], ["2"])

elide() collapses redundant nesting of one bracket type, keeping only the
outermost pair of each scope:

    { { { 1 } } + { { 1 } } } = { { 2 } }   ->   { 1 } + { 1 } = { 2 }
"""

from .core.rules import MalformedRuleError

BRACKETS = {
    "curly":  ("{", "}"),
    "square": ("[", "]"),
    "paren":  ("(", ")"),
}


def tokenize(text: str) -> list:
    return text.split()


def elide(tokens, open_brace: str = "{", close_brace: str = "}") -> list:
    output = []
    open_scope = False
    for token in tokens:
        if token == open_brace:
            if not open_scope:
                output.append(open_brace)
                open_scope = True
            continue
        if token == close_brace:
            if open_scope:
                output.append(close_brace)
                open_scope = False
            continue
        output.append(token)
    return output


def split_equation(tokens, separator: str = "=") -> tuple:
    """Split a token list on its single separator token."""
    tokens = list(tokens)
    positions = [i for i, t in enumerate(tokens) if t == separator]
    if len(positions) != 1:
        raise MalformedRuleError(
            f"expected exactly one {separator!r} in {' '.join(tokens)!r}, "
            f"found {len(positions)}"
        )
    i = positions[0]
    return tokens[:i], tokens[i + 1:]


def parse_equation(text: str, bracket: str = None) -> tuple:
    """
    "lhs = rhs" -> (lhs_tokens, rhs_tokens).

    Args:
        bracket: "curly", "square" or "paren" to elide that bracket type
                 first; None to keep the tokens as written.
    """
    tokens = tokenize(text)
    if bracket is not None:
        if bracket not in BRACKETS:
            raise ValueError(f"Unknown bracket type: {bracket!r}. Choose from: {list(BRACKETS)}")
        tokens = elide(tokens, *BRACKETS[bracket])
    return split_equation(tokens)
