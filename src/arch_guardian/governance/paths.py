"""Path comparison helpers shared by the registry and the detectors.

Import strings are usually relative ("../../lib/physics/orbit") or aliased
("@/lib/physics/orbit"), so every comparison works on path fragments aligned
to segment boundaries rather than on whole paths.
"""

from __future__ import annotations

import posixpath

from ..snapshot.models import normalize_path

SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py")


def strip_extension(path: str) -> str:
    root, ext = posixpath.splitext(path)
    return root if ext in SOURCE_EXTENSIONS else path


_RELATIVE_SEGMENTS = {"", ".", "..", "@", "~"}


def _segments(path: str) -> str:
    parts = [p for p in strip_extension(normalize_path(path)).split("/") if p not in _RELATIVE_SEGMENTS]
    return "/" + "/".join(parts) + "/"


def contains_fragment(path: str, fragment: str) -> bool:
    """True when ``fragment`` appears in ``path`` starting at a segment boundary.

    >>> contains_fragment("src/lib/physics/orbit.ts", "lib/physics/")
    True
    >>> contains_fragment("src/mylib/physics.ts", "lib/physics/")
    False
    """
    frag = normalize_path(fragment).strip("/")
    if not frag:
        return False
    haystack = "/" + normalize_path(path).lstrip("/")
    if fragment.endswith("/"):
        return f"/{frag}/" in haystack + "/"
    return f"/{frag}" in haystack


def path_matches(path: str, source: str) -> bool:
    """True when ``path`` names the same file as ``source``.

    Either side may be a suffix of the other's directory chain, and file
    extensions are ignored.
    """
    a = _segments(path)
    b = _segments(source)
    if a == "//" or b == "//":
        return False
    return a.endswith(b) or b.endswith(a)


def glob_matches(import_path: str, pattern: str) -> bool:
    """Match an import string against a forbidden-import pattern.

    ``*`` matches any import. Patterns ending in ``/*`` or ``/**`` match any
    import under that directory fragment. Other patterns must name the
    imported path exactly or as its trailing segments.
    """
    if pattern == "*" or pattern == "**":
        return True
    if pattern.endswith("/**"):
        return contains_fragment(import_path, pattern[:-3] + "/")
    if pattern.endswith("/*"):
        return contains_fragment(import_path, pattern[:-2] + "/")
    target = strip_extension(normalize_path(import_path))
    wanted = strip_extension(normalize_path(pattern))
    return target == wanted or target.endswith("/" + wanted)
