"""
Template field extraction.

Jinja2 AST를 순회하여 템플릿이 참조하는 필드를 점 표기 경로로 수집한다.

    {{ model.customer.name }}                → "model.customer.name"
    {% for item in model.items %}{{ item.sku }}{% endfor %}
                                             → "model.items",
                                               "item.sku" (iterator=item, collection=model.items)

템플릿 내부에서 정의된 이름({% set %}, loop, macro 인자)은 필드가 아니다.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from jinja2 import Environment, nodes

# for 블록 안에서 jinja가 제공하는 변수
LOOP_VARIABLE = "loop"


@dataclass(frozen=True)
class TemplateField:
    """템플릿이 참조하는 필드 하나."""
    name: str
    iterator: str | None = None     # 반복 변수에서 시작하면 그 이름
    collection: str | None = None   # 반복 변수가 도는 컬렉션 경로 (model 기준)

    @property
    def parts(self) -> list[str]:
        return self.name.split(".")

    @property
    def root(self) -> str:
        return self.parts[0]


class TemplateFields:
    """추출된 필드 모음 (중복 제거, 등장 순서 유지)."""

    def __init__(self, fields: list[TemplateField] | None = None):
        self._fields: dict[TemplateField, None] = {}
        for f in fields or []:
            self.add(f)

    def add(self, field: TemplateField) -> None:
        self._fields.setdefault(field, None)

    def merge(self, other: "TemplateFields") -> None:
        for f in other:
            self.add(f)

    @property
    def names(self) -> list[str]:
        return list(dict.fromkeys(f.name for f in self._fields))

    def __iter__(self) -> Iterator[TemplateField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self._fields)

    def __repr__(self) -> str:
        return f"TemplateFields({self.names!r})"


def extract_fields(source: str, env: Environment | None = None) -> TemplateFields:
    """
    Jinja2 소스에서 필드 추출.

    Args:
        source: 템플릿 소스 (docxtpl은 patch된 XML)
        env: 파싱에 쓸 Environment (globals는 필드에서 제외)

    Returns:
        TemplateFields

    Raises:
        jinja2.TemplateSyntaxError: 템플릿 문법 오류
    """
    env = env or Environment()
    fields = TemplateFields()
    collector = _FieldCollector(fields, ignored=set(env.globals))
    collector.visit(env.parse(source), {})
    return fields


# =============================================================================
# AST walk
# =============================================================================

# scope: 이름 → 컬렉션 경로. None이면 템플릿 로컬 (검증 대상 아님).
Scope = dict[str, str | None]


def _dotted(node: nodes.Node) -> str | None:
    """Name/Getattr/상수 Getitem 체인 → "a.b.c". 그 외는 None."""
    if isinstance(node, nodes.Name):
        return node.name
    if isinstance(node, nodes.Getattr):
        base = _dotted(node.node)
        return f"{base}.{node.attr}" if base else None
    if (
        isinstance(node, nodes.Getitem)
        and isinstance(node.arg, nodes.Const)
        and isinstance(node.arg.value, str)
    ):
        base = _dotted(node.node)
        return f"{base}.{node.arg.value}" if base else None
    return None


def _target_names(target: nodes.Node) -> list[str]:
    if isinstance(target, nodes.Name):
        return [target.name]
    if isinstance(target, nodes.Tuple):
        return [n for item in target.items for n in _target_names(item)]
    return []


class _FieldCollector:
    def __init__(self, fields: TemplateFields, ignored: set[str]):
        self.fields = fields
        self.ignored = ignored

    def visit(self, node: nodes.Node, scope: Scope) -> None:
        if isinstance(node, nodes.For):
            self._visit_for(node, scope)
            return

        if isinstance(node, nodes.Assign):
            self.visit(node.node, scope)
            self._bind_locals(node.target, scope)
            return

        if isinstance(node, nodes.AssignBlock):
            for child in node.body:
                self.visit(child, scope)
            self._bind_locals(node.target, scope)
            return

        if isinstance(node, nodes.With):
            for value in node.values:
                self.visit(value, scope)
            inner = dict(scope)
            for target in node.targets:
                self._bind_locals(target, inner)
            self._visit_all(node.body, inner)
            return

        if isinstance(node, (nodes.Macro, nodes.CallBlock)):
            self._visit_callable(node, scope)
            return

        if isinstance(node, (nodes.Name, nodes.Getattr, nodes.Getitem)):
            path = _dotted(node)
            if path is not None:
                if not (isinstance(node, nodes.Name) and node.ctx != "load"):
                    self._add(path, scope)
                return

        for child in node.iter_child_nodes():
            self.visit(child, scope)

    def _visit_all(self, body: list[nodes.Node], scope: Scope) -> None:
        for child in body:
            self.visit(child, scope)

    def _visit_for(self, node: nodes.For, scope: Scope) -> None:
        self.visit(node.iter, scope)

        inner = dict(scope)
        collection = self._canonical(_dotted(node.iter), scope)
        if isinstance(node.target, nodes.Name) and collection is not None:
            inner[node.target.name] = collection
        else:
            self._bind_locals(node.target, inner)
        inner[LOOP_VARIABLE] = None

        if node.test is not None:
            self.visit(node.test, inner)
        self._visit_all(node.body, inner)
        self._visit_all(node.else_, scope)

    def _visit_callable(self, node: nodes.Macro | nodes.CallBlock, scope: Scope) -> None:
        for default in node.defaults:
            self.visit(default, scope)
        if isinstance(node, nodes.CallBlock):
            self.visit(node.call, scope)
        else:
            scope[node.name] = None

        inner = dict(scope)
        for arg in node.args:
            inner[arg.name] = None
        for name in ("varargs", "kwargs", "caller"):
            inner[name] = None
        self._visit_all(node.body, inner)

    def _bind_locals(self, target: nodes.Node, scope: Scope) -> None:
        for name in _target_names(target):
            scope[name] = None

    def _canonical(self, path: str | None, scope: Scope) -> str | None:
        """반복 변수로 시작하는 경로를 model 기준 경로로 바꾼다."""
        if path is None:
            return None
        root, _, rest = path.partition(".")
        if root not in scope:
            return path
        base = scope[root]
        if base is None:
            return None
        return f"{base}.{rest}" if rest else base

    def _add(self, path: str, scope: Scope) -> None:
        root = path.partition(".")[0]
        if root in scope:
            collection = scope[root]
            if collection is not None:
                self.fields.add(TemplateField(path, iterator=root, collection=collection))
            return
        if root in self.ignored:
            return
        self.fields.add(TemplateField(path))
