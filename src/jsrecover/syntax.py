"""Parsing, code generation and pretty printing for JavaScript source.

The rest of the package never talks to esprima, escodegen or jsbeautifier
directly; it goes through :func:`parse`, :func:`generate` and
:func:`beautify` so that parser failures surface as :class:`ParseError` and
generator failures as :class:`GenerationError`.
"""

from __future__ import annotations

import logging

import escodegen
import esprima
import jsbeautifier

from .errors import GenerationError, ParseError

logger = logging.getLogger(__name__)

PARSE_OPTIONS = {'tolerant': True, 'jsx': True, 'range': True}


def parse(code: str):
    """Parse ``code`` as a script, falling back to a module.

    Node ranges are kept so that callers can slice the exact source text of
    a subtree out of ``code``.
    """
    try:
        return esprima.parseScript(code, PARSE_OPTIONS)
    except Exception as script_error:
        try:
            return esprima.parseModule(code, PARSE_OPTIONS)
        except Exception:
            raise ParseError(str(script_error)) from script_error


def generate(tree) -> str:
    try:
        return escodegen.generate(tree)
    except Exception as e:
        raise GenerationError(f'{type(e).__name__}: {e}') from e


def source_of(node, code: str) -> str:
    """Exact text of ``node`` in ``code``, regenerated if it has no range."""
    if node.range:
        start, end = node.range
        return code[start:end]
    return generate(node)


def beautifier_options():
    options = jsbeautifier.default_options()
    options.indent_size = 2
    options.max_preserve_newlines = 2
    options.preserve_newlines = True
    options.end_with_newline = False
    options.wrap_line_length = 0
    options.space_before_conditional = True
    options.e4x = True  # keep JSX tags intact
    return options


def beautify(code: str) -> str:
    return jsbeautifier.beautify(code, beautifier_options())
