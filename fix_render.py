from typing import Any, List

import fix_ast

from fix_lexer import Token, group_body, split_lambda, tokenize


class UnresolvedFunctionReference(Exception):
    pass


def is_dotted_name(ref: str) -> bool:
    return bool(ref) and all(part.isidentifier() for part in ref.split("."))


class Renderer:
    """ Node visitor class that renders resolved expressions as Python call syntax.

        Note: each `_render_<Node>()` method should return a `str`.
    """

    def __init__(self, resolver=None):
        # When set, parenthesized fragments are resolved and rendered recursively
        self.resolver = resolver

    def render(self, node: fix_ast.Expr) -> str:
        return self._render(node)

    def _render(self, node: fix_ast.Node) -> Any:
        method = f"_render_{node.__class__.__name__}"
        visitor = getattr(self, method)
        return visitor(node)

    def _render_Call(self, node: fix_ast.Call) -> str:
        if not is_dotted_name(node.function):
            raise UnresolvedFunctionReference(
                f"Cannot render '{node.function}' as a function reference"
            )
        return f"{node.function}({self._render(node.left)}, {self._render(node.right)})"

    def _render_ExpressionFragment(self, node: fix_ast.ExpressionFragment) -> str:
        if self.resolver is not None and len(node.tokens) == 1:
            if (body := group_body(node.tokens[0])) is not None and body.strip():
                return f"({self._render_tokens(tokenize(body))})"
        return node.text

    def _render_tokens(self, tokens: List[Token]) -> str:
        # The `lambda <params>:` header is kept as is, only its body is resolved
        if (parts := split_lambda(tokens)) is not None:
            params, body = parts
            header = " ".join(["lambda", fix_ast.ExpressionFragment(params).text]).rstrip()
            return f"{header}: {self._render_tokens(body)}"
        return self._render(self.resolver.resolve_tokens(tokens))
