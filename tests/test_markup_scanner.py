from __future__ import annotations

from pathlib import Path

from codeimpact import evidence as ev
from codeimpact.markup_scanner import scan_markup, scan_webapp

PAGE = """\
<h:form>
  <h:inputText value="#{newMember.name}"/>
  <h:commandButton action="#{memberController.register}"/>
  <h:dataTable var="_member" value="#{members}">
    <h:outputText value="#{_member.email}"/>
  </h:dataTable>
  <h:outputText rendered="#{empty members}" value="#{request.contextPath}"/>
  <h:outputText value="#{sessionScope.user}"/>
</h:form>
"""


def test_bean_and_method_tokens() -> None:
    events = scan_markup(PAGE, "index.xhtml")
    beans = [e.bean for e in events if isinstance(e, ev.MarkupBeanReferenced)]
    methods = [(e.bean, e.method_name) for e in events if isinstance(e, ev.MarkupMethodReferenced)]
    assert beans == ["newMember", "memberController", "members"]
    assert methods == [("newMember", "name"), ("memberController", "register")]
    assert all(e.file_name == "index.xhtml" for e in events)


def test_missing_webapp_dir_yields_nothing(tmp_path: Path) -> None:
    assert scan_webapp(tmp_path / "nope") == []


def test_scan_webapp_walks_nested_pages(tmp_path: Path) -> None:
    page = tmp_path / "webapp" / "admin" / "users.xhtml"
    page.parent.mkdir(parents=True)
    page.write_text('<a action="#{userAdmin.purge}"/>', encoding="utf-8")
    (tmp_path / "webapp" / "notes.txt").write_text("#{ignored}", encoding="utf-8")

    events = scan_webapp(tmp_path / "webapp")
    assert events == [
        ev.MarkupBeanReferenced("userAdmin", "users.xhtml"),
        ev.MarkupMethodReferenced("userAdmin", "purge", "users.xhtml"),
    ]
