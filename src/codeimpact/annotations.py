"""
Annotation vocabularies that mark a class or method as framework-managed or
as test code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable

FRAMEWORK_ANNOTATIONS: FrozenSet[str] = frozenset(
    {
        # REST
        "GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "PATCH",
        "Path", "Produces", "Consumes", "PathParam", "QueryParam", "FormParam",
        "RestController", "Controller", "RequestMapping", "RequestBody", "ApplicationPath",
        # CDI / injection
        "Autowired", "Inject", "Qualifier", "Named", "Observes",
        "ApplicationScoped", "RequestScoped", "SessionScoped", "ConversationScoped",
        # bean validation
        "Valid", "NotNull", "NotEmpty", "NotBlank", "Size", "Min", "Max", "Pattern",
        # JPA / EJB
        "Entity", "Stateless", "Stateful", "Singleton", "MessageDriven",
        "Table", "Column", "Id", "GeneratedValue", "ManyToOne", "OneToMany",
        "ManyToMany", "OneToOne", "JoinColumn", "JoinTable", "Transactional",
        # qualifiers and stereotypes
        "Default", "Alternative", "Model", "Repository", "Service", "Component",
        # events
        "ObservesAsync", "Reception", "TransactionPhase",
    }
)

TEST_ANNOTATIONS: FrozenSet[str] = frozenset(
    {
        "Test", "Before", "After", "BeforeEach", "AfterEach", "BeforeAll", "AfterAll",
        "Deployment", "RunWith", "Rule", "ClassRule", "ExtendWith", "Timeout",
        "DisplayName", "Disabled", "DisabledOnOs", "EnabledOnOs", "Tag",
        "Nested", "ParameterizedTest", "RepeatedTest", "TestFactory",
    }
)


def strip_qualifier(name: str) -> str:
    """``javax.inject.Inject`` -> ``Inject``; ``@Inject`` -> ``Inject``."""
    return name.lstrip("@").rsplit(".", 1)[-1]


@dataclass(frozen=True)
class AnnotationVocabulary:
    framework: FrozenSet[str] = FRAMEWORK_ANNOTATIONS
    test: FrozenSet[str] = TEST_ANNOTATIONS

    @classmethod
    def extended(
        cls, framework: Iterable[str] = (), test: Iterable[str] = ()
    ) -> "AnnotationVocabulary":
        return cls(
            framework=FRAMEWORK_ANNOTATIONS | {strip_qualifier(a) for a in framework},
            test=TEST_ANNOTATIONS | {strip_qualifier(a) for a in test},
        )

    def is_framework(self, annotation: str) -> bool:
        return strip_qualifier(annotation) in self.framework

    def is_test(self, annotation: str) -> bool:
        return strip_qualifier(annotation) in self.test
