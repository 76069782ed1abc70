"""
Report fields validator.

템플릿이 참조하는 필드가 model 구조에 존재하는지 검사한다.

규칙:
- model 이름으로 시작하는 필드 → model 타입의 어노테이션을 따라 검사
- 반복 변수로 시작하는 필드 → iterator_names 우선, 없으면 metadata.list_fields
- 그 외 이름 → UNKNOWN_ROOT
- Any, 제네릭 컬렉션, Mapping, 타입 없는 property/메서드에서 검사 종료 (통과)
"""

from typing import Any

from src.core.introspect import attribute_type, resolvable_class
from src.domain.errors import ErrorCodes
from src.domain.schemas import FieldErrors
from src.render.fields import TemplateField, TemplateFields
from src.render.metadata import FieldsMetadata


class ReportFieldsValidator:
    """
    model 타입 기준 필드 검증기.

    Usage:
        validator = ReportFieldsValidator(Invoice, "model", {"item": LineItem})
        errors = validator.validate(report.extract_fields())
        if errors.has_errors:
            ...
    """

    def __init__(
        self,
        model_type: type,
        model_name: str,
        iterator_names: dict[str, type] | None = None,
        metadata: FieldsMetadata | None = None,
    ):
        self.model_type = model_type
        self.model_name = model_name
        self.iterator_names = dict(iterator_names or {})
        self.metadata = metadata or FieldsMetadata()

    def validate(
        self,
        fields: TemplateFields,
        errors: FieldErrors | None = None,
    ) -> FieldErrors:
        """
        필드 검증.

        Args:
            fields: 템플릿에서 추출한 필드
            errors: 결과를 누적할 FieldErrors (None이면 새로 생성)

        Returns:
            FieldErrors (object_name = model 이름)
        """
        if errors is None:
            errors = FieldErrors(object_name=self.model_name)

        for field in fields:
            if field.iterator is not None:
                self._validate_iterator_field(field, errors)
            elif field.root == self.model_name:
                self._check_path(self.model_type, field.name, field.parts[1:], errors)
            else:
                errors.reject(
                    field.name,
                    ErrorCodes.UNKNOWN_ROOT,
                    f"'{field.root}' is not a model or iterator name "
                    f"(expected '{self.model_name}')",
                )

        return errors

    def _validate_iterator_field(self, field: TemplateField, errors: FieldErrors) -> None:
        element = self.iterator_names.get(field.iterator)
        if element is None and field.collection is not None:
            element = self.metadata.list_fields.get(field.collection)

        if element is None:
            errors.reject(
                field.name,
                ErrorCodes.UNRESOLVED_ITERATOR,
                f"element type of '{field.iterator}' "
                f"(iterating '{field.collection}') is unknown",
            )
            return

        self._check_path(element, field.name, field.parts[1:], errors)

    def _check_path(
        self,
        cls: type,
        field_name: str,
        parts: list[str],
        errors: FieldErrors,
    ) -> None:
        current: Any = cls
        for part in parts:
            target = resolvable_class(current)
            if target is None:
                return

            exists, current = attribute_type(target, part)
            if not exists:
                errors.reject(
                    field_name,
                    ErrorCodes.MISSING_FIELD,
                    f"'{target.__name__}' has no field '{part}'",
                )
                return
