"""
Model type introspection.

model 클래스의 어노테이션(dataclass 필드, 클래스 어노테이션, 타입이 붙은 property)으로
점 표기 경로를 따라갈 수 있는지 판단하는 헬퍼.
"""

import collections.abc
import functools
import inspect
import types
import typing
from typing import Any, Union, get_args, get_origin

_MISSING = object()

SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.Collection,
    collections.abc.Iterable,
)


def type_hints(cls: type) -> dict[str, Any]:
    """
    클래스 어노테이션 (MRO 포함).

    forward reference를 풀 수 없으면 해당 어노테이션은 Any로 본다.
    """
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints: dict[str, Any] = {}
        for klass in reversed(getattr(cls, "__mro__", [cls])):
            for name in getattr(klass, "__annotations__", {}):
                hints[name] = Any
        return hints


def unwrap_optional(tp: Any) -> Any:
    """Optional[X] / X | None → X."""
    origin = get_origin(tp)
    if origin in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return unwrap_optional(args[0])
    return tp


def element_type(tp: Any) -> type | None:
    """
    컬렉션 어노테이션의 원소 타입.

    list[X], Sequence[X], tuple[X, ...] 등 → X. 그 외 None.
    """
    tp = unwrap_optional(tp)
    origin = get_origin(tp)
    if origin not in SEQUENCE_ORIGINS:
        return None

    args = get_args(tp)
    if origin is tuple:
        if len(args) != 2 or args[1] is not Ellipsis:
            return None
    if not args:
        return None

    elem = unwrap_optional(args[0])
    return elem if get_origin(elem) is None and isinstance(elem, type) else None


def resolvable_class(tp: Any) -> type | None:
    """
    속성 검사를 계속할 수 있는 클래스면 반환, 아니면 None (검사 종료).

    Any, 제네릭 컬렉션, Mapping, __getattr__를 가진 타입은 구조를 알 수 없다.
    """
    tp = unwrap_optional(tp)
    if tp is None or tp is Any or get_origin(tp) is not None:
        return None
    if not isinstance(tp, type):
        return None
    if issubclass(tp, collections.abc.Mapping):
        return None
    if inspect.getattr_static(tp, "__getattr__", _MISSING) is not _MISSING:
        return None
    return tp


def attribute_type(cls: type, name: str) -> tuple[bool, Any]:
    """
    cls에 name 속성이 선언되어 있는지와 그 타입.

    Returns:
        (존재 여부, 타입). 타입을 알 수 없으면 Any.
    """
    hints = type_hints(cls)
    if name in hints:
        return True, hints[name]

    attr = inspect.getattr_static(cls, name, _MISSING)
    if attr is _MISSING:
        return False, None

    getter = None
    if isinstance(attr, property):
        getter = attr.fget
    elif isinstance(attr, functools.cached_property):
        getter = attr.func

    if getter is not None:
        try:
            return True, typing.get_type_hints(getter).get("return", Any)
        except (NameError, TypeError):
            return True, Any

    return True, Any
