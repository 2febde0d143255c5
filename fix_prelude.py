""" Functions behind the default operator table.

    Containers are treated as the list monad and callables as the reader functor, so
    `f <$> [1, 2]` maps over a list while `f <$> g` composes.
"""
from typing import Any, Callable, Iterable, List


def compose(f: Callable, g: Callable) -> Callable:
    """ `f . g` """
    return lambda x: f(g(x))


def mappend(a, b):
    """ `a <> b` """
    return a + b


def fmap(f: Callable, functor):
    """ `f <$> xs` """
    if callable(functor):
        return compose(f, functor)
    return [f(x) for x in functor]


def replace(value, functor: Iterable) -> List:
    """ `value <$ xs`, also `xs $> value` """
    return [value for _ in functor]


def ap(functions: Iterable[Callable], values: Iterable) -> List:
    """ `fs <*> xs` """
    values = list(values)
    return [f(x) for f in functions for x in values]


def discard_left(a: Iterable, b: Iterable) -> List:
    """ `a *> b` """
    b = list(b)
    return [y for _ in a for y in b]


def discard_right(a: Iterable, b: Iterable) -> List:
    """ `a <* b` """
    b = list(b)
    return [x for x in a for _ in b]


def chain(values: Iterable, f: Callable[[Any], Iterable]) -> List:
    """ `xs >>= f`, also `f =<< xs` """
    return [y for x in values for y in f(x)]


def then(a: Iterable, b: Iterable) -> List:
    """ `a >> b`, also `b << a` """
    return discard_left(a, b)


def apply(f: Callable, x):
    """ `f $ x` """
    return f(x)
