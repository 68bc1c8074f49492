"""Rewriting and evaluation helpers for ``${{ ... }}`` workflow expressions."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable

log = logging.getLogger(__name__)

Evaluate = Callable[[str, bool], Any]

_STRING_END = re.compile(r"(?:''|[^'])*'")
_INSERT_DIRECTIVE = re.compile(r"\$\{\{\s*insert\s*\}\}")


class ExpressionSyntaxError(ValueError):
    """Raised when an expression has an unclosed string or ``${{`` block."""


def has_expression(text: str) -> bool:
    """Return True if ``text`` contains both an opening ``${{`` and a ``}}``."""
    return "${{" in text and "}}" in text


def escape_format_string(text: str) -> str:
    """Double every brace so the text survives a ``format()`` call."""
    return text.replace("{", "{{").replace("}", "}}")


def rewrite_sub_expression(text: str, force_format: bool = False) -> str:
    """Turn a string with embedded ``${{ }}`` blocks into one ``format(...)`` call.

    A string made of a single expression is returned unchanged unless
    ``force_format`` is set.
    """
    if not has_expression(text):
        return text

    pos = 0
    expr_start = -1
    in_string = False
    results: list[str] = []
    parts: list[str] = []

    while pos < len(text):
        if in_string:
            match = _STRING_END.match(text, pos)
            if match is None:
                raise ExpressionSyntaxError("unclosed string.")
            in_string = False
            pos = match.end()
        elif expr_start > -1:
            expr_end = text.find("}}", pos)
            str_start = text.find("'", pos)

            if expr_end > -1 and str_start > -1:
                if expr_end < str_start:
                    str_start = -1
                else:
                    expr_end = -1

            if expr_end > -1:
                parts.append(f"{{{len(results)}}}")
                results.append(text[expr_start:expr_end].strip())
                pos = expr_end + 2
                expr_start = -1
            elif str_start > -1:
                pos = str_start + 1
                in_string = True
            else:
                raise ExpressionSyntaxError("unclosed expression.")
        else:
            found = text.find("${{", pos)
            if found != -1:
                parts.append(escape_format_string(text[pos:found]))
                expr_start = found + 3
                pos = expr_start
            else:
                parts.append(escape_format_string(text[pos:]))
                pos = len(text)

    format_out = "".join(parts)
    if len(results) == 1 and format_out == "{0}" and not force_format:
        return text

    out = "format('{}', {})".format(format_out.replace("'", "''"), ", ".join(results))
    if out != text:
        log.debug("expression '%s' rewritten to '%s'", text, out)
    return out


def interpolate(evaluate: Evaluate, text: str) -> str:
    """Substitute every ``${{ }}`` block in ``text`` using ``evaluate``.

    Evaluation errors are logged and yield an empty string; a result that is
    not a string raises ``TypeError``.
    """
    if not has_expression(text):
        return text

    expr = rewrite_sub_expression(text, True)
    log.debug("evaluating expression '%s'", expr)
    try:
        evaluated = evaluate(expr, False)
    except Exception as err:  # evaluation failures degrade to an empty string
        log.error("Unable to interpolate expression '%s': %s", expr, err)
        return ""

    if not isinstance(evaluated, str):
        raise TypeError(f"Expression {expr} did not evaluate to a string")
    return evaluated


def _is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def eval_bool(evaluate: Evaluate, expr: str) -> bool:
    """Evaluate an ``if:`` condition and return its truthiness."""
    rewritten = rewrite_sub_expression(expr, False)
    log.debug("evaluating expression '%s'", rewritten)
    return _is_truthy(evaluate(rewritten, True))


def _expand_scalar(node: str, evaluate: Evaluate) -> Any:
    if not has_expression(node):
        return node
    return evaluate(rewrite_sub_expression(node, False), False)


def _expand_mapping(node: dict, evaluate: Evaluate) -> dict:
    out: dict = {}
    for key, value in node.items():
        value = expand_node(value, evaluate)
        # An "insert" key merges the mapping it evaluates to into its parent.
        if isinstance(key, str) and _INSERT_DIRECTIVE.search(key):
            if isinstance(value, dict):
                out.update(value)
            continue
        out[expand_node(key, evaluate)] = value
    return out


def _expand_sequence(node: list, evaluate: Evaluate) -> list:
    out: list = []
    for item in node:
        was_sequence = isinstance(item, list)
        value = expand_node(item, evaluate)
        # A scalar that evaluates to a list is spliced into the parent list.
        if isinstance(value, list) and not was_sequence:
            out.extend(value)
        else:
            out.append(value)
    return out


def expand_node(node: Any, evaluate: Evaluate) -> Any:
    """Return a copy of a loaded YAML value with its expressions evaluated."""
    if isinstance(node, dict):
        return _expand_mapping(node, evaluate)
    if isinstance(node, list):
        return _expand_sequence(node, evaluate)
    if isinstance(node, str):
        return _expand_scalar(node, evaluate)
    return node