"""
Page text noise filter

``document.body.innerText`` on real pages often contains inline CSS that
leaked into the rendered text. clean_page_text() drops such lines with an
ordered list of named rules. This is a best-effort, lossy heuristic: a
genuine text line that happens to look like a CSS declaration is dropped too.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

_CLASS_SELECTOR_OPENING = re.compile(r"^\.[a-zA-Z0-9_-]+\s*{")
_CSS_DECLARATION = re.compile(r"^[a-zA-Z-]+:[a-zA-Z0-9%\s().,-]+;$")
_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")


@dataclass(frozen=True)
class NoiseRule:
    """A named predicate; lines it matches are removed from the page text"""

    name: str
    description: str
    matches: Callable[[str], bool]


NOISE_RULES: tuple[NoiseRule, ...] = (
    NoiseRule(
        name="braces",
        description="Rule blocks written on one line, e.g. 'a { color: red }'",
        matches=lambda line: "{" in line and "}" in line,
    ),
    NoiseRule(
        name="keyframes",
        description="CSS animation definitions",
        matches=lambda line: "@keyframes" in line,
    ),
    NoiseRule(
        name="class_selector",
        description="Lines opening a class rule, e.g. '.header {'",
        matches=lambda line: _CLASS_SELECTOR_OPENING.match(line) is not None,
    ),
    NoiseRule(
        name="css_declaration",
        description="Bare declarations, e.g. 'color: blue;' or 'margin: 10px;'",
        matches=lambda line: _CSS_DECLARATION.match(line) is not None,
    ),
)


def matching_rule(line: str, rules: Iterable[NoiseRule] = NOISE_RULES) -> NoiseRule | None:
    """Return the first rule that classifies the line as noise"""
    for rule in rules:
        if rule.matches(line):
            return rule
    return None


def unescape_unicode(line: str) -> str:
    """Replace literal \\uXXXX escape sequences with the characters they denote"""
    return _UNICODE_ESCAPE.sub(lambda match: chr(int(match.group(1), 16)), line)


def clean_page_text(text: str, rules: Iterable[NoiseRule] = NOISE_RULES) -> str:
    """
    Strip noise from rendered page text.

    Lines are trimmed; empty lines and lines matched by any rule are dropped;
    escape sequences are decoded. Line order is preserved.
    """
    rules = tuple(rules)
    kept = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line or matching_rule(line, rules) is not None:
            continue
        kept.append(unescape_unicode(line))
    return "\n".join(kept)
