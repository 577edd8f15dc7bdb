"""
Composer Kernel: Source Preprocessor

Ordered textual rewrites applied before the source is parsed. Each rewrite is
a no-op when its pattern is absent.

  1. inject the navigation shim before the first component declaration
     (or the anonymous default export, or at the top when neither exists)
  2. rewrite dynamic link targets to route through the shim
  3. comment out module imports (stylesheet imports are kept)
  4. detect the default-exported component name, strip export keywords
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from composer.kernel.literal import find_balanced

logger = logging.getLogger(__name__)

NAVIGATION_CAPABILITY = "__navigate"

NAVIGATION_SHIM = f"""// Keeps link activation inside the preview
const handleNavigation = (e, path) => {{
  e.preventDefault();
  if ({NAVIGATION_CAPABILITY}) {{
    {NAVIGATION_CAPABILITY}(path);
    return false;
  }}
  return true;
}};

"""

STYLE_IMPORT_MARKERS = (".css", ".scss", ".sass", ".less", "styled-components", "@emotion")

_COMPONENT_DECLARATION = re.compile(
    r"^[ \t]*(?:export\s+(?:default\s+)?)?"
    r"(?:(?:const|let|var)\s+[A-Z][\w$]*\s*(?::[^=\n]+)?=|(?:async\s+)?function\s+[A-Z][\w$]*\s*[(<])",
    re.MULTILINE,
)
_SHIM_PRESENT = re.compile(r"\b(?:const|let|var|function)\s+handleNavigation\b")
_DYNAMIC_HREF = re.compile(r"\bhref=\{")
_IMPORT = re.compile(
    r"^[ \t]*import\s+(?:type\s+)?(?:[\w$*{}\s,]+?\s+from\s+)?(['\"])([^'\"]+)\1[ \t]*;?",
    re.MULTILINE,
)
_EXPORT_DEFAULT_DECLARATION = re.compile(r"^([ \t]*)export\s+default\s+((?:async\s+)?function|class)\s+([\w$]+)", re.MULTILINE)
_EXPORT_DEFAULT_ANONYMOUS = re.compile(r"^([ \t]*)export\s+default\s+(?=\(|async\b|function\s*\()", re.MULTILINE)
_EXPORT_DEFAULT_NAME = re.compile(r"^[ \t]*export\s+default\s+([\w$]+)[ \t]*;?[ \t]*$", re.MULTILINE)
_EXPORT_DECLARATION = re.compile(r"^([ \t]*)export\s+(?=(?:const|let|var|function|class|async\s+function)\b)", re.MULTILINE)
_EXPORT_LIST = re.compile(r"^[ \t]*export\s+(?:\{[^}]*\}|\*)(?:\s+from\s+['\"][^'\"]+['\"])?[ \t]*;?", re.MULTILINE)


@dataclass
class PreprocessedSource:
    code: str
    component_name: str


def inject_navigation_shim(source: str) -> str:
    if _SHIM_PRESENT.search(source):
        return source
    match = _COMPONENT_DECLARATION.search(source) or _EXPORT_DEFAULT_ANONYMOUS.search(source)
    if match is None:
        # no declaration to anchor on: program scope, ahead of everything
        return NAVIGATION_SHIM + source
    return source[: match.start()] + NAVIGATION_SHIM + source[match.start() :]


def rewrite_links(source: str) -> str:
    out: list[str] = []
    cursor = 0
    for match in _DYNAMIC_HREF.finditer(source):
        if match.start() < cursor:
            continue
        brace = match.end() - 1
        close = find_balanced(source, brace)
        if close < 0:
            continue
        expression = source[brace + 1 : close].strip()
        out.append(source[cursor : match.start()])
        out.append(f'href="#" data-path={{{expression}}} onClick={{(e) => handleNavigation(e, {expression})}}')
        cursor = close + 1
    out.append(source[cursor:])
    return "".join(out)


def _is_style_import(statement: str) -> bool:
    return any(marker in statement for marker in STYLE_IMPORT_MARKERS)


def remove_imports(source: str) -> str:
    def replace(match: re.Match[str]) -> str:
        statement = match.group(0)
        if _is_style_import(statement):
            return statement
        return "// " + " ".join(statement.split()) + " - removed for dynamic evaluation"

    return _IMPORT.sub(replace, source)


def detect_component_name(source: str, fallback_name: str) -> str:
    for pattern, group in ((_EXPORT_DEFAULT_DECLARATION, 3), (_EXPORT_DEFAULT_NAME, 1)):
        match = pattern.search(source)
        if match:
            return match.group(group)
    return fallback_name


def strip_exports(source: str, component_name: str) -> str:
    source = _EXPORT_DEFAULT_DECLARATION.sub(r"\1\2 \3", source)
    source = _EXPORT_DEFAULT_ANONYMOUS.sub(rf"\1const {component_name} = ", source)
    source = _EXPORT_DEFAULT_NAME.sub(lambda m: "// " + m.group(0).strip() + " - removed for dynamic evaluation", source)
    source = _EXPORT_LIST.sub(lambda m: "// " + " ".join(m.group(0).split()) + " - removed for dynamic evaluation", source)
    return _EXPORT_DECLARATION.sub(r"\1", source)


def preprocess_source(source: str, fallback_name: str = "DynamicComponent") -> PreprocessedSource:
    code = inject_navigation_shim(source)
    code = rewrite_links(code)
    code = remove_imports(code)
    name = detect_component_name(code, fallback_name)
    code = strip_exports(code, name)
    logger.debug("preprocess: component %s, %d chars", name, len(code))
    return PreprocessedSource(code=code, component_name=name)
