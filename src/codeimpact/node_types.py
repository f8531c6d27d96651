"""
Core data model: edge labels, usage tags, dependency edges, call facts and
per-method usage records.

Classes are plain fully-qualified name strings; the name is the vertex key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Set, Tuple


class EdgeLabel(str, Enum):
    """Label of a class -> class dependency edge."""

    IMPORT = "IMPORT"
    STATIC_IMPORT = "STATIC_IMPORT"
    REFERENCE = "REFERENCE"
    UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
    ANNOTATION_REFERENCE = "ANNOTATION_REFERENCE"


# Proof of actual use on their own
STRONG_LABELS: FrozenSet[EdgeLabel] = frozenset(
    {EdgeLabel.REFERENCE, EdgeLabel.ANNOTATION_REFERENCE, EdgeLabel.STATIC_IMPORT}
)
# Count as use only once the import is recorded as used
WEAK_LABELS: FrozenSet[EdgeLabel] = frozenset(
    {EdgeLabel.IMPORT, EdgeLabel.UNRESOLVED_REFERENCE}
)


class UsageTag(str, Enum):
    """How a method is being used."""

    CALLED = "CALLED"  # directly called from source code
    FRAMEWORK = "FRAMEWORK"  # annotations, EL expressions
    TEST = "TEST"  # test code


UNRESOLVED_CLASS = "(unresolved)"
UNKNOWN_METHOD = "(field initializer or unknown method)"


def simple_name(class_name: str) -> str:
    return class_name.rsplit(".", 1)[-1]


def package_name(class_name: str) -> str:
    if "." not in class_name:
        return ""
    return class_name.rsplit(".", 1)[0]


def method_key(class_name: str, method_name: str) -> str:
    return f"{class_name}.{method_name}"


def split_method_key(full_name: str) -> Tuple[str, str]:
    """Split ``pkg.Cls.method`` into (``pkg.Cls``, ``method``)."""
    if "." not in full_name:
        return "", full_name
    cls, _, meth = full_name.rpartition(".")
    return cls, meth


def default_bean_name(class_name: str) -> str:
    """Default CDI/JSF bean name: simple name with its first character lower-cased."""
    sn = simple_name(class_name)
    if not sn:
        return sn
    return sn[0].lower() + sn[1:]


@dataclass
class DependencyEdge:
    source: str
    target: str
    label: EdgeLabel

    @property
    def is_strong(self) -> bool:
        return self.label in STRONG_LABELS


@dataclass(frozen=True)
class MethodCallFact:
    caller_class: str
    caller_method: str
    callee_class: str
    callee_method: str

    @property
    def caller(self) -> str:
        return method_key(self.caller_class, self.caller_method)

    @property
    def callee(self) -> str:
        return method_key(self.callee_class, self.callee_method)

    def __str__(self) -> str:
        return f"{self.caller} → {self.callee}"


@dataclass
class MethodUsage:
    class_name: str
    method_name: str
    usages: Set[UsageTag] = field(default_factory=set)

    @property
    def full_name(self) -> str:
        return method_key(self.class_name, self.method_name)

    def add_usage(self, tag: UsageTag) -> None:
        self.usages.add(tag)

    def has_usage(self, tag: UsageTag) -> bool:
        return tag in self.usages

    @property
    def is_unused(self) -> bool:
        return not self.usages

    @property
    def is_test_only(self) -> bool:
        return self.usages == {UsageTag.TEST}

    def __str__(self) -> str:
        return self.full_name
