"""
Java evidence producer built on javalang.

Two passes over the source roots:
 1. parse every file and index the declared classes (package + simple name,
    method names, field types, superclass);
 2. walk each class declaration and emit evidence events in a fixed order:
    ClassDeclared, TestFileMarker, ClassAnnotated, ImportSeen, type
    references, AnnotationReferenceResolved, method calls, then
    MethodDeclared / MethodAnnotated.

Nested classes are indexed as ``package.Simple`` and walked on their own; a
class only reports what sits in its direct members. Resolution is name based:
a type resolves through an explicit import, the own package, a wildcard
import onto a project class, or a ``java.lang`` built-in. Everything else is
emitted as unresolved and left to the classification engine's fallback.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import javalang
from javalang.ast import walk_tree

from . import evidence as ev
from .evidence import BUILTIN_PACKAGE, BUILTIN_TYPES, ImportRecord, fallback_name
from .node_types import UNKNOWN_METHOD

logger = logging.getLogger(__name__)

SKIPPED_FILES = {"package-info.java", "module-info.java"}

_TYPE_DECLARATIONS = (
    javalang.tree.ClassDeclaration,
    javalang.tree.InterfaceDeclaration,
    javalang.tree.EnumDeclaration,
)


@dataclass
class SourceFile:
    path: Path
    package: str
    imports: List[ImportRecord]
    is_test: bool
    tree: javalang.tree.CompilationUnit


@dataclass
class ClassInfo:
    name: str
    package: str
    node: javalang.tree.Declaration
    source: SourceFile
    methods: Set[str] = field(default_factory=set)
    # field name -> type as written
    fields: Dict[str, str] = field(default_factory=dict)
    extends: Optional[str] = None


# --- file discovery ---
def _matches_any(rel: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(rel, pat) for pat in patterns)


def collect_java_files(
    project_root: Path, source_roots: Sequence[str], exclude: Sequence[str] = ()
) -> List[Path]:
    collected: List[Path] = []
    for root in source_roots:
        base = Path(project_root) / root
        if not base.is_dir():
            logger.info("Skipping missing source root %s", base)
            continue
        for dirpath, dirnames, filenames in os.walk(base):
            for d in list(dirnames):
                rel = (Path(dirpath) / d).relative_to(project_root).as_posix()
                if _matches_any(rel + "/", exclude):
                    dirnames.remove(d)
            dirnames.sort()
            for fn in sorted(filenames):
                if not fn.endswith(".java") or fn in SKIPPED_FILES:
                    continue
                f_path = Path(dirpath) / fn
                if _matches_any(f_path.relative_to(project_root).as_posix(), exclude):
                    continue
                collected.append(f_path)
    return collected


def is_test_path(path: Path, project_root: Path, test_dirs: Sequence[str]) -> bool:
    try:
        parts = path.relative_to(project_root).parts[:-1]
    except ValueError:
        parts = path.parts[:-1]
    return any(p in test_dirs for p in parts)


# --- javalang helpers ---
def type_text(node) -> Optional[str]:
    """Dotted name of a ReferenceType (``Map.Entry``); None for primitives."""
    if not isinstance(node, javalang.tree.ReferenceType):
        return None
    parts = [node.name]
    sub = node.sub_type
    while sub is not None:
        parts.append(sub.name)
        sub = sub.sub_type
    return ".".join(parts)


def class_members(node) -> list:
    """Direct members; enum constants come first, initializer blocks are statement lists."""
    body = node.body
    if isinstance(body, javalang.tree.EnumBody):
        return list(body.constants or []) + list(body.declarations or [])
    return list(body or [])


def nodes_of(root, pattern) -> Iterator:
    """Every node of type ``pattern`` under ``root``, which may be a plain list."""
    for _, node in walk_tree(root):
        if isinstance(node, pattern):
            yield node


def _type_parameter_names(node) -> Set[str]:
    return {tp.name for tp in (getattr(node, "type_parameters", None) or [])}


def parse_source(path: Path, project_root: Path, test_dirs: Sequence[str]) -> Optional[SourceFile]:
    try:
        text = path.read_text(encoding="utf-8")
        tree = javalang.parse.parse(text)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return None
    except (javalang.parser.JavaSyntaxError, javalang.tokenizer.LexerError) as e:
        logger.warning("Cannot parse %s: %s", path, e.__class__.__name__)
        return None

    package = tree.package.name if tree.package else ""
    imports = []
    for imp in tree.imports or []:
        name = f"{imp.path}.*" if imp.wildcard else imp.path
        imports.append(ImportRecord(name, bool(imp.static), bool(imp.wildcard)))
    return SourceFile(path, package, imports, is_test_path(path, project_root, test_dirs), tree)


class JavaEvidenceExtractor:
    def __init__(self, project_root: Path, test_dirs: Sequence[str] = ("test",)):
        self.project_root = Path(project_root)
        self.test_dirs = list(test_dirs)
        self.classes: Dict[str, ClassInfo] = {}
        self.files_parsed = 0
        self.files_failed = 0

    # --- pass 1 ---
    def index(self, files: Sequence[Path]) -> List[ClassInfo]:
        found: List[ClassInfo] = []
        for path in files:
            src = parse_source(path, self.project_root, self.test_dirs)
            if src is None:
                self.files_failed += 1
                continue
            self.files_parsed += 1
            for _, node in src.tree.filter(javalang.tree.TypeDeclaration):
                if not isinstance(node, _TYPE_DECLARATIONS):
                    continue
                name = f"{src.package}.{node.name}" if src.package else node.name
                info = ClassInfo(name, src.package, node, src)
                for member in class_members(node):
                    if isinstance(member, javalang.tree.MethodDeclaration):
                        info.methods.add(member.name)
                    elif isinstance(member, javalang.tree.FieldDeclaration):
                        t = type_text(member.type)
                        if t:
                            for decl in member.declarators:
                                info.fields[decl.name] = t
                if isinstance(node, javalang.tree.ClassDeclaration) and node.extends is not None:
                    info.extends = type_text(node.extends)
                self.classes[name] = info
                found.append(info)
        return found

    # --- resolution ---
    def resolve_type(self, name: str, info: ClassInfo) -> Optional[str]:
        if "." in name:
            return name if name in self.classes else None
        for imp in info.source.imports:
            if not imp.is_static and imp.matches_simple_name(name):
                return imp.name
        same_pkg = f"{info.package}.{name}" if info.package else name
        if same_pkg in self.classes:
            return same_pkg
        for imp in info.source.imports:
            if imp.is_wildcard and not imp.is_static:
                candidate = f"{imp.base_package}.{name}"
                if candidate in self.classes:
                    return candidate
        if name in BUILTIN_TYPES:
            return f"{BUILTIN_PACKAGE}.{name}"
        return None

    def _declaring_class(self, class_name: str, method: str) -> Optional[str]:
        """Walk the project superclass chain for the class declaring ``method``."""
        seen: Set[str] = set()
        current: Optional[str] = class_name
        while current is not None and current not in seen:
            seen.add(current)
            info = self.classes.get(current)
            if info is None:
                return None
            if method in info.methods:
                return current
            current = self.resolve_type(info.extends, info) if info.extends else None
        return None

    # --- pass 2 ---
    def extract(self, files: Sequence[Path]) -> List[ev.Evidence]:
        events: List[ev.Evidence] = []
        for info in self.index(files):
            events.extend(self.class_events(info))
        logger.debug(
            "java: %d files parsed, %d failed, %d classes, %d events",
            self.files_parsed, self.files_failed, len(self.classes), len(events),
        )
        return events

    def class_events(self, info: ClassInfo) -> Iterator[ev.Evidence]:
        node = info.node
        cls = info.name
        members = [m for m in class_members(node) if not isinstance(m, javalang.tree.TypeDeclaration)]

        yield ev.ClassDeclared(cls)
        if info.source.is_test:
            yield ev.TestFileMarker(cls)

        annotations = list(node.annotations or [])
        for member in members:
            annotations.extend(nodes_of(member, javalang.tree.Annotation))
        for anno in annotations:
            yield ev.ClassAnnotated(cls, anno.name)

        for imp in info.source.imports:
            yield ev.ImportSeen(cls, imp.name, imp.is_static, imp.is_wildcard)

        yield from self._type_reference_events(info, members)

        for anno in annotations:
            qualified = self.resolve_type(anno.name, info) or fallback_name(
                anno.name, info.source.imports, cls
            ).qualified_name
            yield ev.AnnotationReferenceResolved(cls, qualified)

        yield from self._call_events(info, members)

        for member in members:
            if not isinstance(member, javalang.tree.MethodDeclaration):
                continue
            yield ev.MethodDeclared(cls, member.name)
            method_annos = list(member.annotations or [])
            for param in member.parameters or []:
                method_annos.extend(param.annotations or [])
            for anno in method_annos:
                yield ev.MethodAnnotated(cls, member.name, anno.name)

    def _type_reference_events(self, info: ClassInfo, members: list) -> Iterator[ev.Evidence]:
        node = info.node
        type_params = _type_parameter_names(node)
        roots = []
        if isinstance(node, javalang.tree.ClassDeclaration):
            if node.extends is not None:
                roots.append(node.extends)
            roots.extend(node.implements or [])
        elif isinstance(node, javalang.tree.InterfaceDeclaration):
            roots.extend(node.extends or [])
        else:
            roots.extend(node.implements or [])

        for member in members:
            roots.append(member)

        seen: Set[str] = set()
        for root in roots:
            local_params = type_params | _type_parameter_names(root)
            sub_types: Set[int] = set()
            for ref in nodes_of(root, javalang.tree.ReferenceType):
                if id(ref) in sub_types:
                    continue
                sub = ref.sub_type
                while sub is not None:
                    sub_types.add(id(sub))
                    sub = sub.sub_type
                name = type_text(ref)
                if not name or name in local_params or name in seen:
                    continue
                seen.add(name)
                resolved = self.resolve_type(name, info)
                if resolved is not None:
                    yield ev.TypeReferenceResolved(info.name, resolved)
                else:
                    yield ev.TypeReferenceUnresolved(info.name, name)

    # --- calls ---
    def _call_sites(self, members: list) -> Iterator[Tuple[str, object]]:
        """(caller name, subtree) pairs; enum constant bodies report their own methods."""
        for member in members:
            if isinstance(member, (javalang.tree.MethodDeclaration, javalang.tree.ConstructorDeclaration)):
                yield member.name, member
            elif isinstance(member, javalang.tree.EnumConstantDeclaration):
                if member.arguments:
                    yield UNKNOWN_METHOD, member.arguments
                body = [m for m in member.body or [] if not isinstance(m, javalang.tree.TypeDeclaration)]
                yield from self._call_sites(body)
            else:
                # fields and initializer blocks
                yield UNKNOWN_METHOD, member

    def _call_events(self, info: ClassInfo, members: list) -> Iterator[ev.Evidence]:
        for caller, site in self._call_sites(members):
            variables = self._variable_types(site)
            handled: Set[int] = set()
            for primary in nodes_of(site, javalang.tree.Primary):
                if not primary.selectors:
                    continue
                yield from self._selector_calls(info, caller, variables, primary, handled)
            for call in nodes_of(site, javalang.tree.MethodInvocation):
                if id(call) in handled:
                    continue
                yield self._qualified_call(info, caller, variables, call)

    def _variable_types(self, member) -> Dict[str, str]:
        variables: Dict[str, str] = {}
        for param in getattr(member, "parameters", None) or []:
            t = type_text(param.type)
            if t:
                variables[param.name] = t
        if isinstance(member, javalang.tree.FieldDeclaration):
            return variables
        for decl in nodes_of(member, javalang.tree.LocalVariableDeclaration):
            t = type_text(decl.type)
            if t:
                for d in decl.declarators:
                    variables[d.name] = t
        for param in nodes_of(member, javalang.tree.FormalParameter):
            t = type_text(param.type)
            if t:
                variables.setdefault(param.name, t)
        return variables

    def _call(self, info: ClassInfo, caller: str, owner: Optional[str], method: str, scope: Optional[str]) -> ev.Evidence:
        is_test = info.source.is_test
        if owner is not None:
            return ev.MethodCallResolved(info.name, caller, owner, method, is_test)
        return ev.MethodCallUnresolved(info.name, caller, method, scope, is_test)

    def _qualified_call(self, info: ClassInfo, caller: str, variables: Dict[str, str], call) -> ev.Evidence:
        qualifier = call.qualifier or ""
        if not qualifier:
            owner = self._declaring_class(info.name, call.member)
            return self._call(info, caller, owner, call.member, None)
        head = qualifier.split(".", 1)[0]
        if "." in qualifier and qualifier not in self.classes:
            return self._call(info, caller, None, call.member, qualifier)
        type_name = variables.get(head) or info.fields.get(head)
        owner = self.resolve_type(type_name or qualifier, info)
        return self._call(info, caller, owner, call.member, qualifier)

    def _selector_calls(
        self, info: ClassInfo, caller: str, variables: Dict[str, str], primary, handled: Set[int]
    ) -> Iterator[ev.Evidence]:
        """Calls in a selector chain: ``this.em.persist()``, ``new Foo().bar()``, ``a.b().c()``."""
        current: Optional[str] = None
        scope = "(expression)"
        if isinstance(primary, javalang.tree.This):
            current, scope = info.name, "this"
        elif isinstance(primary, javalang.tree.ClassCreator):
            written = type_text(primary.type) or "?"
            current = self.resolve_type(written, info)
            scope = f"new {written}()"
        elif isinstance(primary, javalang.tree.MethodInvocation):
            prefix = f"{primary.qualifier}." if primary.qualifier else ""
            scope = f"{prefix}{primary.member}()"

        for sel in primary.selectors:
            if isinstance(sel, javalang.tree.MemberReference):
                target = self.classes.get(current) if current else None
                field_type = target.fields.get(sel.member) if target else None
                current = self.resolve_type(field_type, target) if field_type else None
                scope = f"{scope}.{sel.member}"
            elif isinstance(sel, javalang.tree.MethodInvocation):
                handled.add(id(sel))
                owner = current
                if current == info.name:
                    owner = self._declaring_class(info.name, sel.member) or info.name
                yield self._call(info, caller, owner, sel.member, scope)
                current = None
                scope = f"{scope}.{sel.member}()"
            else:
                current = None


def extract_project(
    project_root: Path,
    source_roots: Sequence[str],
    test_dirs: Sequence[str] = ("test",),
    exclude: Sequence[str] = (),
) -> List[ev.Evidence]:
    """Evidence events for every Java class under ``source_roots``."""
    files = collect_java_files(Path(project_root), source_roots, exclude)
    if not files:
        logger.warning("No .java files found under %s", ", ".join(source_roots))
        return []
    return JavaEvidenceExtractor(project_root, test_dirs).extract(files)
