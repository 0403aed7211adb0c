"""
Tests for column data type normalization.
"""

import pytest

from runway.parser.shared.datatypes import normalize_data_type
from runway.typing import DataType


class TestNormalizeDataType:
    """Test data type normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("character varying(255)", "VARCHAR(255)"),
            ("integer", "INT"),
            ("INT4", "INT"),
            ("boolean", "BOOL"),
            ("double precision", "DOUBLE"),
            ("decimal(10, 2)", "NUMERIC(10,2)"),
            ("timestamp with time zone", "TIMESTAMPTZ"),
            ("timestamp   without time zone", "TIMESTAMP"),
            ("text", "TEXT"),
            ("serial8", "BIGSERIAL"),
        ],
    )
    def test_aliases_collapse_to_canonical_token(self, raw, expected):
        assert str(normalize_data_type(raw)) == expected

    def test_varchar_without_length_has_no_parameter(self):
        data_type = normalize_data_type("varchar")
        assert data_type == DataType(base="VARCHAR")
        assert data_type.parameters == ()

    def test_precision_and_scale_kept_in_order(self):
        assert normalize_data_type("NUMERIC(3,2)").parameters == ("3", "2")

    def test_array_suffix(self):
        data_type = normalize_data_type("integer[]")
        assert data_type.base == "INT"
        assert data_type.is_array is True
        assert str(data_type) == "INT[]"

    def test_array_keyword(self):
        assert normalize_data_type("text ARRAY").is_array is True

    def test_parameterized_array(self):
        data_type = normalize_data_type("varchar(20)[]")
        assert data_type == DataType(base="VARCHAR", parameters=("20",), is_array=True)

    def test_user_defined_type_keeps_spelling(self):
        assert normalize_data_type('public."OrderStatus"').base == "OrderStatus"
        assert normalize_data_type("order_status").base == "order_status"

    def test_empty_text_rejected(self):
        with pytest.raises(ValueError):
            normalize_data_type("   ")
