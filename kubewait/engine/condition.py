from functools import lru_cache
from typing import Optional, Tuple

from jsonpath_ng.ext import parse as jp_parse

from kubewait.errors import MalformedCondition

from .context import Condition


def parse_condition(expr: str) -> Condition:
    """Parse ``type=value``.

    Only the first ``=`` separates, so ``jsonpath={.status.readyReplicas}=3``
    keeps ``{.status.readyReplicas}=3`` as its value.
    """
    if expr is None or "=" not in expr:
        raise MalformedCondition(f"condition must be in format 'type=value', got {expr!r}")
    ctype, value = expr.split("=", 1)
    ctype = ctype.strip().lower()
    if not ctype:
        raise MalformedCondition(f"condition type is empty in {expr!r}")
    return Condition(ctype, value.strip())


def parse_jsonpath_value(value: str) -> Tuple[str, Optional[str]]:
    """Split a jsonpath payload into ``(path, literal)``.

    ``{.status.phase}=Running`` -> (".status.phase", "Running")
    ``{.metadata.name}``        -> (".metadata.name", None)
    ``.status.phase==Running``  -> (".status.phase", "Running")
    """
    s = value.strip()
    if not s:
        raise MalformedCondition("jsonpath expression is empty")

    if s.startswith("{"):
        depth = 0
        end = -1
        for i, ch in enumerate(s):
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    end = i
                    break
        if end < 0:
            raise MalformedCondition(f"unterminated '{{' in jsonpath {value!r}")
        path = s[1:end].strip()
        rest = s[end + 1:].strip()
        if not rest:
            return path, None
        if rest.startswith("=="):
            return path, rest[2:].strip()
        if rest.startswith("="):
            return path, rest[1:].strip()
        raise MalformedCondition(f"unexpected text after jsonpath: {rest!r}")

    if "==" in s:
        path, literal = s.split("==", 1)
        return path.strip(), literal.strip()
    if "=" in s:
        path, literal = s.split("=", 1)
        return path.strip(), literal.strip()
    return s, None


@lru_cache(maxsize=128)
def compile_jsonpath(path: str):
    """Compile a kubectl-style path (``.status.phase``) for jsonpath_ng."""
    p = path.strip()
    if p.startswith("."):
        p = "$" + p
    elif not p.startswith("$"):
        p = "$." + p
    try:
        return jp_parse(p)
    except Exception as e:
        raise MalformedCondition(f"invalid jsonpath {path!r}: {e}") from e


def validate_condition(cond: Condition) -> None:
    if cond.type == "jsonpath":
        path, _ = parse_jsonpath_value(cond.value)
        compile_jsonpath(path)
