import copy
import builtins
import importlib

from typing import Any, Callable, Dict, List, Optional
from collections import namedtuple

import fix_ast

from fix_ops import PRELUDE, OperatorTable
from fix_lexer import Token, group_body, split_lambda, tokenize
from fix_parser import ResolveError, Resolver
from fix_render import Renderer, UnresolvedFunctionReference


class EvaluationError(Exception):
    pass


EvalResult = namedtuple(typename="EvalResult", field_names=["value", "ast", "tagged", "rendered"])


class FixityCodeEvaluator:
    """ Evaluator for expressions written with user-defined infix operators.

        Expressions are resolved against the evaluator's operator table, then evaluated
        bottom-up: fragments as Python expressions in `namespace`, and calls by looking up
        the operator's function reference (first in `namespace`, then as an importable
        dotted path).

        Note: fragments run through `eval()` with the full builtins, this is not a sandbox
        and must only be given trusted code.
    """

    def __init__(self, table: OperatorTable = PRELUDE, namespace: Optional[Dict[str, Any]] = None):
        self.namespace: Dict[str, Any] = dict(namespace or {})
        self.reset(table)

    def reset(self, table: Optional[OperatorTable] = None):
        if table is not None:
            self.table = table
        self.resolver = Resolver(self.table)
        self.renderer = Renderer(self.resolver)

    def evaluate(self, code: str, options: Dict[str, bool] = None) -> Any:
        return self._evaluate(code, **(options or {})).value

    def _evaluate(self, code: str, tagonly=False, renderonly=False, verbose=False) -> EvalResult:
        """ Evaluates the given `code`.

            Returns an `EvalResult` with the result accessible in `.value`.

            - `tagonly`: only tag the code (note: yields a string representation of the atoms)
            - `renderonly`: resolve and render the code, but don't evaluate it
            - `verbose`: also fill in the tagged atoms and the rendered expression
        """
        tagged = self.resolver.tag(tokenize(code))
        if tagonly:
            return EvalResult(value=str(tagged), ast=None, tagged=tagged, rendered=None)

        ast = self.resolver.resolve_atoms(tagged)
        rendered = self.renderer.render(ast) if (renderonly or verbose) else None
        if renderonly:
            return EvalResult(value=rendered, ast=ast, tagged=tagged, rendered=rendered)

        return EvalResult(
            value=self._eval(ast),
            ast=ast,
            tagged=tagged if verbose else None,
            rendered=rendered,
        )

    def resolve_function(self, ref: str) -> Callable:
        """ Look up the callable behind an operator's function reference. """
        if ref in self.namespace:
            function = self.namespace[ref]
        else:
            function = _import_dotted(ref)

        if not callable(function):
            raise UnresolvedFunctionReference(f"Function reference '{ref}' is not callable")
        return function

    def _eval(self, node: fix_ast.Node) -> Any:
        method = f"_eval_{node.__class__.__name__}"
        visitor = getattr(self, method)
        return visitor(node)

    def _eval_Call(self, node: fix_ast.Call) -> Any:
        function = self.resolve_function(node.function)
        left, right = self._eval(node.left), self._eval(node.right)
        try:
            return function(left, right)
        except (EvaluationError, ResolveError, UnresolvedFunctionReference):
            raise  # from a lambda body evaluated inside `function`
        except Exception as err:
            raise EvaluationError(f"Error calling '{node.function}': {err}") from err

    def _eval_ExpressionFragment(self, node: fix_ast.ExpressionFragment) -> Any:
        # Operators inside parentheses are resolved on their own
        if len(node.tokens) == 1 and (body := group_body(node.tokens[0])) is not None:
            if body.strip():
                return self._eval_tokens(tokenize(body))

        try:
            return eval(node.text, {"__builtins__": builtins, **self.namespace})
        except Exception as err:
            raise EvaluationError(f"Cannot evaluate '{node.text}': {err}") from err

    def _eval_tokens(self, tokens: List[Token]) -> Any:
        if (parts := split_lambda(tokens)) is None:
            return self._eval(self.resolver.resolve_tokens(tokens))

        # `lambda <params>: <body>` binds its parameters, then evaluates the resolved body
        params, body = parts
        header = fix_ast.ExpressionFragment(params).text
        try:
            bind = eval(f"lambda {header}: locals()", {"__builtins__": builtins, **self.namespace})
        except Exception as err:
            raise EvaluationError(f"Invalid lambda parameters '{header}': {err}") from err

        def function(*args, **kwargs):
            scoped = copy.copy(self)
            scoped.namespace = {**self.namespace, **bind(*args, **kwargs)}
            return scoped._eval_tokens(body)

        return function


def _import_dotted(ref: str) -> Any:
    """ Import `package.module.attr`, trying the longest importable module prefix first. """
    parts = ref.split(".")
    if len(parts) == 1 and hasattr(builtins, ref):
        return getattr(builtins, ref)
    if len(parts) < 2 or not all(part.isidentifier() for part in parts):
        raise UnresolvedFunctionReference(f"Cannot resolve function reference '{ref}'")

    for split in range(len(parts) - 1, 0, -1):
        try:
            target = importlib.import_module(".".join(parts[:split]))
        except ImportError:
            continue
        try:
            for attr in parts[split:]:
                target = getattr(target, attr)
        except AttributeError as err:
            raise UnresolvedFunctionReference(
                f"Cannot resolve function reference '{ref}': {err}"
            ) from err
        return target

    raise UnresolvedFunctionReference(f"Cannot resolve function reference '{ref}': no such module")
