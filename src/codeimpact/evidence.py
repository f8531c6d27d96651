"""
Evidence events emitted by source/markup producers and consumed by the
classification engine, plus the name-resolution result types.

Producers never touch the graph; they only build lists of these events.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Union

from .node_types import package_name

BUILTIN_PACKAGE = "java.lang"

BUILTIN_TYPES: FrozenSet[str] = frozenset(
    {
        "String", "Object", "Exception", "RuntimeException", "Integer",
        "Boolean", "Long", "Double", "Float", "Byte", "Character",
        "Short", "Void", "Class",
    }
)


# --- events ---
@dataclass(frozen=True)
class ClassDeclared:
    class_name: str


@dataclass(frozen=True)
class ClassAnnotated:
    class_name: str
    annotation: str


@dataclass(frozen=True)
class TestFileMarker:
    class_name: str


@dataclass(frozen=True)
class ImportSeen:
    class_name: str
    import_name: str
    is_static: bool = False
    is_wildcard: bool = False


@dataclass(frozen=True)
class TypeReferenceResolved:
    class_name: str
    referenced: str


@dataclass(frozen=True)
class TypeReferenceUnresolved:
    """``name`` is the type as written; an already qualified name is kept as is."""

    class_name: str
    name: str


@dataclass(frozen=True)
class AnnotationReferenceResolved:
    class_name: str
    annotation: str


@dataclass(frozen=True)
class MethodDeclared:
    class_name: str
    method_name: str


@dataclass(frozen=True)
class MethodAnnotated:
    class_name: str
    method_name: str
    annotation: str


@dataclass(frozen=True)
class MethodCallResolved:
    caller_class: str
    caller_method: str
    callee_class: str
    callee_method: str
    is_test_code: bool = False


@dataclass(frozen=True)
class MethodCallUnresolved:
    """``scope`` is the call qualifier as written (``em``, ``Logger``) or None."""

    caller_class: str
    caller_method: str
    callee_method: str
    scope: Optional[str] = None
    is_test_code: bool = False


@dataclass(frozen=True)
class MarkupBeanReferenced:
    bean: str
    file_name: Optional[str] = None


@dataclass(frozen=True)
class MarkupMethodReferenced:
    bean: str
    method_name: str
    file_name: Optional[str] = None


Evidence = Union[
    ClassDeclared,
    ClassAnnotated,
    TestFileMarker,
    ImportSeen,
    TypeReferenceResolved,
    TypeReferenceUnresolved,
    AnnotationReferenceResolved,
    MethodDeclared,
    MethodAnnotated,
    MethodCallResolved,
    MethodCallUnresolved,
    MarkupBeanReferenced,
    MarkupMethodReferenced,
]


# --- name resolution results ---
@dataclass(frozen=True)
class ResolvedName:
    qualified_name: str

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class FallbackName:
    """Heuristic guess. ``rule`` is one of: qualified, import, wildcard, builtin, package."""

    qualified_name: str
    rule: str

    @property
    def is_fallback(self) -> bool:
        return True


TypeName = Union[ResolvedName, FallbackName]


@dataclass(frozen=True)
class ImportRecord:
    name: str
    is_static: bool = False
    is_wildcard: bool = False

    @property
    def base_package(self) -> str:
        """Package a wildcard import opens (``java.util.*`` -> ``java.util``)."""
        if self.name.endswith(".*"):
            return self.name[:-2]
        return self.name

    def matches_simple_name(self, name: str) -> bool:
        return not self.is_wildcard and self.name.endswith("." + name)


def fallback_name(
    simple: str, imports: Iterable[ImportRecord], class_name: str
) -> FallbackName:
    """Best-effort qualified name for a type reference that did not resolve.

    Order: already qualified, explicit import, wildcard import, java.lang
    built-in, then the referencing class's own package.
    """
    if "." in simple:
        return FallbackName(simple, "qualified")
    imports = list(imports)
    for imp in imports:
        if imp.matches_simple_name(simple):
            return FallbackName(imp.name, "import")
    for imp in imports:
        if imp.is_wildcard:
            return FallbackName(f"{imp.base_package}.{simple}", "wildcard")
    if simple in BUILTIN_TYPES:
        return FallbackName(f"{BUILTIN_PACKAGE}.{simple}", "builtin")
    pkg = package_name(class_name)
    return FallbackName(f"{pkg}.{simple}" if pkg else simple, "package")
