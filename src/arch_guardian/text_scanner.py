"""Keyword and regex heuristics over raw source lines.

The detectors never read source text directly; they ask a ``TextScanner``.
Keeping every regex here lets the heuristics be tested on plain strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

_STRING_LITERAL = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"|`(?:\\.|[^`\\])*`")
_LINE_COMMENT = re.compile(r"//.*$")
_NUMBER = re.compile(r"(?<![\w.$])-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?(?![\w.])")
_ASSIGNED_NAME = re.compile(r"([A-Za-z_$][\w$]*)\s*(?::\s*[\w<>\[\]|. ]+)?\s*[:=]\s*[^=]")
_IMPORT_LINE = re.compile(r"^\s*(import|export\s+\*|export\s+\{[^}]*\}\s+from)\b")
_CONDITIONAL = re.compile(r"\b(if|for|while|switch)\s*\(")
_CONTAINER_EXPORT = re.compile(
    r"\bexport\s+(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*([\[{])"
)
_FROZEN_MARKERS = ("as const", "Object.freeze", "readonly")
_FREEZE_CALL = re.compile(r"\bObject\.freeze\(\s*([A-Za-z_$][\w$]*)\s*\)")

UNIT_PATTERNS: tuple[str, ...] = (
    r"\bkm\b",
    r"\bm\b",
    r"\bkg\b",
    r"\bs\b",
    r"\bh\b",
    r"\bhours?\b",
    r"\bdays?\b",
    r"\byears?\b",
    r"\bdeg(?:rees?)?\b",
    r"\brad(?:ians?)?\b",
    r"\bkm/s\b",
)
# Unit spelled into an identifier: radiusKm, RADIUS_KM, periodHours
_UNIT_SUFFIX = re.compile(
    r"_(?:KM|KG|DEG(?:REES)?|RAD|HOURS|DAYS|SECONDS|MS)(?![A-Za-z])"
    r"|[a-z0-9](?:Km|Kg|Deg(?:rees)?|Rad|Hours|Days|Seconds|Ms)(?![a-z])"
)
FRAME_PATTERNS: tuple[str, ...] = (
    r"J2000",
    r"ecliptic",
    r"equatorial",
    r"galactic",
    r"ICRF",
    r"FK5",
    r"heliocentric",
    r"geocentric",
)


@dataclass(frozen=True)
class KeywordHit:
    line: int
    column: int
    keyword: str


@dataclass(frozen=True)
class NumericLiteral:
    """A number found in source text.

    ``context`` is the identifier the literal is assigned to on that line,
    or an empty string.
    """

    value: float
    text: str
    line: int
    column: int
    context: str


@dataclass(frozen=True)
class ContainerExport:
    name: str
    line: int
    column: int
    frozen: bool


@lru_cache(maxsize=512)
def _word_regex(keyword: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


@lru_cache(maxsize=512)
def _regex(pattern: str, flags: int = re.IGNORECASE) -> re.Pattern:
    return re.compile(pattern, flags)


def _blank(match: re.Match) -> str:
    return " " * len(match.group(0))


def code_only(line: str) -> str:
    """Blank out string literals and line comments, keeping column positions."""
    without_strings = _STRING_LITERAL.sub(_blank, line)
    return _LINE_COMMENT.sub(_blank, without_strings)


class TextScanner:
    """Stateless collection of text heuristics."""

    def keywords_in(self, text: str, keywords: Iterable[str]) -> list[str]:
        """Keywords occurring as whole words (case-insensitive), in given order."""
        return [k for k in dict.fromkeys(keywords) if _word_regex(k).search(text)]

    def scan_keywords(self, lines: Sequence[str], keywords: Iterable[str]) -> list[KeywordHit]:
        """Every whole-word keyword occurrence, line by line."""
        keywords = list(dict.fromkeys(keywords))
        hits: list[KeywordHit] = []
        for number, line in enumerate(lines, start=1):
            for keyword in keywords:
                for match in _word_regex(keyword).finditer(line):
                    hits.append(KeywordHit(number, match.start() + 1, keyword))
        hits.sort(key=lambda h: (h.line, h.column, h.keyword))
        return hits

    def matching_patterns(self, text: str, patterns: Iterable[str]) -> list[str]:
        """The regex patterns (case-insensitive) that match ``text``."""
        return [p for p in patterns if _regex(p).search(text)]

    def numeric_literals(self, lines: Sequence[str]) -> list[NumericLiteral]:
        """Numbers in code (not in strings, comments or import lines)."""
        literals: list[NumericLiteral] = []
        for number, line in enumerate(lines, start=1):
            if _IMPORT_LINE.match(line):
                continue
            code = code_only(line)
            for match in _NUMBER.finditer(code):
                text = match.group(0)
                try:
                    value = float(text)
                except ValueError:
                    continue
                prefix = code[: match.start()]
                names = _ASSIGNED_NAME.findall(prefix)
                context = names[-1] if names else ""
                literals.append(NumericLiteral(value, text, number, match.start() + 1, context))
        return literals

    def conditional_branches(self, lines: Sequence[str]) -> list[KeywordHit]:
        hits: list[KeywordHit] = []
        for number, line in enumerate(lines, start=1):
            for match in _CONDITIONAL.finditer(code_only(line)):
                hits.append(KeywordHit(number, match.start() + 1, match.group(1)))
        return hits

    def container_exports(self, lines: Sequence[str]) -> list[ContainerExport]:
        """Exported object/array literals and whether they are frozen.

        A literal counts as frozen when it carries a freeze marker itself or
        when ``Object.freeze(NAME)`` appears anywhere in the file.
        """
        exports: list[ContainerExport] = []
        frozen_later = {name for line in lines for name in _FREEZE_CALL.findall(code_only(line))}
        for index, line in enumerate(lines):
            code = code_only(line)
            match = _CONTAINER_EXPORT.search(code)
            if not match:
                continue
            closing = self._closing_line(lines, index, match.group(2), match.end(2) - 1)
            span = " ".join(lines[index : closing + 1])
            frozen = any(marker in span for marker in _FROZEN_MARKERS) or match.group(1) in frozen_later
            exports.append(ContainerExport(match.group(1), index + 1, match.start() + 1, frozen))
        return exports

    @staticmethod
    def _closing_line(lines: Sequence[str], start: int, opener: str, offset: int) -> int:
        closer = "}" if opener == "{" else "]"
        depth = 0
        for index in range(start, len(lines)):
            code = code_only(lines[index])
            if index == start:
                code = code[offset:]
            depth += code.count(opener) - code.count(closer)
            if depth <= 0:
                return index
        return len(lines) - 1

    def units_in(self, text: str) -> list[str]:
        """Unit metadata spelled in a comment or folded into an identifier."""
        found = [p for p in UNIT_PATTERNS if _regex(p, 0).search(text)]
        if _UNIT_SUFFIX.search(text):
            found.append("identifier-suffix")
        return found

    def frames_in(self, text: str) -> list[str]:
        return [p for p in FRAME_PATTERNS if _regex(p, 0).search(text)]


DEFAULT_SCANNER = TextScanner()
