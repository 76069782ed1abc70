"""
test_fields_validator.py - ReportFieldsValidator 테스트

규칙:
- model 이름으로 시작 → model 타입 어노테이션으로 검사
- 반복 변수 → iterator_names 우선, 없으면 metadata.list_fields
- 그 외 이름 → UNKNOWN_ROOT
"""

from src.domain.errors import ErrorCodes
from src.render.fields import TemplateField, TemplateFields, extract_fields
from src.render.metadata import FieldsMetadata
from src.validation.fields import ReportFieldsValidator
from tests.models import Invoice, LineItem


def _codes(errors) -> dict[str, str]:
    return {e.field: e.code for e in errors.errors}


class TestModelFields:
    """model 루트 필드 검사."""

    def test_existing_fields_are_valid(self):
        fields = extract_fields(
            "{{ model.number }}{{ model.customer.name }}{{ model.customer.email }}"
            "{{ model.total }}{{ model.logo.width_mm }}"
        )

        errors = ReportFieldsValidator(Invoice, "model").validate(fields)

        assert not errors.has_errors
        assert errors.object_name == "model"

    def test_missing_field(self):
        fields = extract_fields("{{ model.customer.phone }}{{ model.nope }}")

        errors = ReportFieldsValidator(Invoice, "model").validate(fields)

        assert _codes(errors) == {
            "model.customer.phone": ErrorCodes.MISSING_FIELD,
            "model.nope": ErrorCodes.MISSING_FIELD,
        }

    def test_opaque_types_end_check(self):
        """Mapping, 타입 없는 값 이하는 검사하지 않는다."""
        fields = extract_fields("{{ model.extra.anything.deep }}{{ model.number.upper }}")

        errors = ReportFieldsValidator(Invoice, "model").validate(fields)

        # str은 클래스이므로 upper는 메서드로 존재
        assert not errors.has_errors

    def test_unknown_root(self):
        fields = extract_fields("{{ invoice.number }}")

        errors = ReportFieldsValidator(Invoice, "model").validate(fields)

        assert _codes(errors) == {"invoice.number": ErrorCodes.UNKNOWN_ROOT}

    def test_custom_model_name(self):
        fields = extract_fields("{{ invoice.number }}")

        errors = ReportFieldsValidator(Invoice, "invoice").validate(fields)

        assert not errors.has_errors
        assert errors.object_name == "invoice"


class TestIteratorFields:
    """반복 변수 필드 검사."""

    SOURCE = "{% for item in model.items %}{{ item.sku }}{{ item.colour }}{% endfor %}"

    def test_iterator_names(self):
        errors = ReportFieldsValidator(
            Invoice, "model", iterator_names={"item": LineItem}
        ).validate(extract_fields(self.SOURCE))

        assert _codes(errors) == {"item.colour": ErrorCodes.MISSING_FIELD}

    def test_metadata_list_fields(self):
        metadata = FieldsMetadata(list_fields={"model.items": LineItem})

        errors = ReportFieldsValidator(Invoice, "model", metadata=metadata).validate(
            extract_fields(self.SOURCE)
        )

        assert _codes(errors) == {"item.colour": ErrorCodes.MISSING_FIELD}

    def test_unresolved_iterator(self):
        errors = ReportFieldsValidator(Invoice, "model").validate(extract_fields(self.SOURCE))

        assert set(_codes(errors).values()) == {ErrorCodes.UNRESOLVED_ITERATOR}

    def test_accumulates_into_given_errors(self):
        validator = ReportFieldsValidator(Invoice, "model", {"item": LineItem})
        first = validator.validate(TemplateFields([TemplateField("model.nope")]))

        result = validator.validate(
            TemplateFields([TemplateField("item.x", iterator="item", collection="model.items")]),
            first,
        )

        assert result is first
        assert result.fields == ["model.nope", "item.x"]
