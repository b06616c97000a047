"""Line contract for forms.

A line is a zero-argument method marked with ``@line``. Lines call the
lines they need (on their own form or on a form they hold a reference
to) and Python's call stack does the ordering; there is no dependency
declaration and no scheduler.

By default every call recomputes. Two opt-in contexts change that:

    with evaluation_cache():
        f1040.l24()      # each (form, line, input) computed once

    with trace_lines() as trace:
        form.fields()    # records caller -> callee edges, raises
                         # LineCycleError if a line re-enters itself
"""

import functools
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .errors import LineCycleError

logger = logging.getLogger(__name__)

LineKey = Tuple[str, str]  # (form tag, line name)

_trace: ContextVar[Optional["LineTrace"]] = ContextVar("taxcore_line_trace", default=None)
_cache: ContextVar[Optional[dict]] = ContextVar("taxcore_line_cache", default=None)


class LineTrace:
    """Dependency edges observed while evaluating lines."""

    def __init__(self):
        self.edges: Dict[LineKey, Set[LineKey]] = {}
        self._stack: List[Tuple[int, LineKey]] = []
        self._active: Set[Tuple[int, str]] = set()

    def enter(self, form, name: str):
        key = (_form_tag(form), name)
        ident = (id(form), name)
        if ident in self._active:
            start = next(i for i, (fid, k) in enumerate(self._stack) if (fid, k[1]) == ident)
            raise LineCycleError([k for _, k in self._stack[start:]] + [key])
        if self._stack:
            self.edges.setdefault(self._stack[-1][1], set()).add(key)
        self.edges.setdefault(key, set())
        self._stack.append((id(form), key))
        self._active.add(ident)

    def exit(self, form, name: str):
        self._stack.pop()
        self._active.discard((id(form), name))

    @property
    def lines(self) -> Set[LineKey]:
        return set(self.edges)

    def dependencies(self, tag: str, name: str) -> Set[LineKey]:
        """Lines called directly by ``tag.name``."""
        return set(self.edges.get((tag, name), ()))

    def is_acyclic(self) -> bool:
        """Check the recorded graph (by tag and line name) for cycles."""
        visiting, done = set(), set()

        def visit(node) -> bool:
            if node in done:
                return True
            if node in visiting:
                return False
            visiting.add(node)
            ok = all(visit(n) for n in self.edges.get(node, ()))
            visiting.discard(node)
            done.add(node)
            return ok

        return all(visit(n) for n in list(self.edges))


def line(method):
    """Mark a zero-argument form method as a line."""
    name = method.__name__

    @functools.wraps(method)
    def wrapper(self):
        trace = _trace.get()
        cache = _cache.get()
        if trace is None and cache is None:
            return method(self)

        if trace is not None:
            trace.enter(self, name)
        try:
            if cache is None:
                return method(self)
            key = (id(self), name, id(getattr(self, "info", None)))
            if key not in cache:
                # Holding the form keeps its id from being reused within the run.
                cache[key] = (self, method(self))
            return cache[key][1]
        finally:
            if trace is not None:
                trace.exit(self, name)

    wrapper.is_line = True
    return wrapper


def line_names(form) -> List[str]:
    """Names of a form's lines in declaration order (base classes first)."""
    names: List[str] = []
    for klass in reversed(type(form).__mro__):
        for attr, value in vars(klass).items():
            if getattr(value, "is_line", False) and attr not in names:
                names.append(attr)
    return names


@contextmanager
def trace_lines() -> Iterator[LineTrace]:
    """Record line dependencies for the duration of the block."""
    trace = LineTrace()
    token = _trace.set(trace)
    try:
        yield trace
    finally:
        _trace.reset(token)


@contextmanager
def evaluation_cache() -> Iterator[dict]:
    """Memoize line values for one run; discarded when the block exits."""
    cache: dict = {}
    token = _cache.set(cache)
    try:
        yield cache
    finally:
        _cache.reset(token)
        logger.debug("Discarding %d cached line values", len(cache))


def _form_tag(form) -> str:
    return getattr(form, "tag", type(form).__name__)
