"""
XHTML/JSF markup scanner - finds EL bean and method tokens (``#{bean}``,
``#{bean.method}``) and emits them as markup evidence.

Page-local variables (``var="item"`` on data tables and loops) and EL
implicit objects are not beans and are skipped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Set

from . import evidence as ev

logger = logging.getLogger(__name__)

EL_RESERVED_WORDS = frozenset(
    {
        "empty", "not", "request", "session", "param", "application", "view", "flash",
        "requestScope", "sessionScope", "applicationScope", "flashScope", "viewScope",
    }
)

_PAGE_VAR_RE = re.compile(r'var\s*=\s*"([^"]+)"')
_BEAN_RE = re.compile(r"#\{([a-zA-Z0-9_]+)")
_METHOD_RE = re.compile(r"#\{([a-zA-Z0-9_]+)\.([a-zA-Z0-9_]+)\}")


def page_variables(content: str) -> Set[str]:
    return set(_PAGE_VAR_RE.findall(content))


def scan_markup(content: str, file_name: Optional[str] = None) -> List[ev.Evidence]:
    """Markup evidence for one page, bean tokens first, then method tokens."""
    skipped = EL_RESERVED_WORDS | page_variables(content)
    events: List[ev.Evidence] = []
    for bean in _BEAN_RE.findall(content):
        if bean in skipped:
            continue
        events.append(ev.MarkupBeanReferenced(bean, file_name))
    for bean, method in _METHOD_RE.findall(content):
        if bean in skipped:
            continue
        events.append(ev.MarkupMethodReferenced(bean, method, file_name))
    return events


def scan_webapp(webapp_dir: Path, include: Sequence[str] = ("**/*.xhtml",)) -> List[ev.Evidence]:
    webapp_dir = Path(webapp_dir)
    if not webapp_dir.is_dir():
        logger.info("Webapp directory %s does not exist, skipping markup", webapp_dir)
        return []

    pages: List[Path] = []
    for pattern in include:
        pages.extend(p for p in webapp_dir.glob(pattern) if p.is_file())
    events: List[ev.Evidence] = []
    for page in sorted(set(pages)):
        try:
            content = page.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read %s: %s", page, e)
            continue
        found = scan_markup(content, page.name)
        logger.debug("%s: %d EL references", page.name, len(found))
        events.extend(found)
    return events
