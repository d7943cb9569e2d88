"""
Tests for the partial update builder.
"""

import pytest

from items_service.errors import InvalidRequest
from items_service.models import UpdateRequest
from items_service.update_builder import PartialUpdateBuilder, placeholder_for


@pytest.fixture
def builder():
    return PartialUpdateBuilder()


class TestBuild:
    """Tests for PartialUpdateBuilder.build."""

    def test_simple_plan(self, builder):
        """Test the basic two-field scenario."""
        plan = builder.build("42", {"name": "Alice", "age": 31})

        assert plan.record_id == "42"
        assert plan.pairs == [("name", "Alice"), ("age", 31)]

    def test_preserves_input_order(self, builder):
        """Test assignments follow the mapping's iteration order."""
        fields = {"zeta": 1, "alpha": 2, "mid": 3, "beta": 4}

        plan = builder.build("id-1", fields)

        assert plan.fields == ["zeta", "alpha", "mid", "beta"]

    def test_one_assignment_per_field(self, builder):
        """Test N fields give N assignments with unique placeholders."""
        fields = {f"field{i}": i for i in range(25)}

        plan = builder.build("id-1", fields)

        assert len(plan.assignments) == 25
        placeholders = [a.placeholder for a in plan.assignments]
        assert len(set(placeholders)) == 25

    def test_placeholders_derived_from_field_names(self, builder):
        """Test placeholders are the sanitized field names."""
        plan = builder.build("id-1", {"name": "Alice", "first-name": "Al"})

        assert [a.placeholder for a in plan.assignments] == [":name", ":first_name"]

    def test_colliding_placeholders_get_suffixes(self, builder):
        """Test fields that sanitize to the same placeholder stay distinct."""
        plan = builder.build("id-1", {"a-b": 1, "a_b": 2, "a.b": 3, "a_b_2": 4})

        placeholders = [a.placeholder for a in plan.assignments]
        assert placeholders[:3] == [":a_b", ":a_b_2", ":a_b_3"]
        assert len(set(placeholders)) == 4

    def test_nested_values_kept_as_is(self, builder):
        """Test structured values pass through untouched."""
        value = {"street": "Main", "tags": ["a", "b"]}

        plan = builder.build("id-1", {"address": value})

        assert plan.assignments[0].value == value

    def test_build_is_deterministic(self, builder):
        """Test building twice yields identical plans."""
        fields = {"name": "Alice", "status": "active", "score-1": 9}

        assert builder.build("42", fields) == builder.build("42", fields)

    def test_reserved_words_flagged(self, builder):
        """Test reserved field names are flagged, case-insensitively."""
        plan = builder.build("42", {"name": "Alice", "Status": "ok", "color": "red"})

        assert plan.reserved_fields == ["name", "Status"]
        assert plan.assignments[2].reserved is False

    def test_input_mapping_not_modified(self, builder):
        """Test the caller's mapping is left alone."""
        fields = {"name": "Alice", "age": 31}

        builder.build("42", fields)

        assert fields == {"name": "Alice", "age": 31}


class TestValidation:
    """Tests for rejected inputs."""

    def test_empty_fields(self, builder):
        """Test empty fields never produce an empty plan."""
        with pytest.raises(InvalidRequest, match="no arguments provided"):
            builder.build("42", {})

    def test_none_fields(self, builder):
        """Test missing fields are rejected."""
        with pytest.raises(InvalidRequest):
            builder.build("42", None)

    @pytest.mark.parametrize("record_id", ["", "   "])
    def test_empty_record_id(self, builder, record_id):
        """Test empty record ids are rejected."""
        with pytest.raises(InvalidRequest, match="path parameter id"):
            builder.build(record_id, {"name": "Alice"})

    def test_empty_field_name(self, builder):
        """Test an empty field name is rejected."""
        with pytest.raises(InvalidRequest):
            builder.build("42", {"": 1})


class TestBuildRequest:
    """Tests for building from an UpdateRequest model."""

    def test_build_request(self, builder):
        """Test the model entry point matches build()."""
        request = UpdateRequest(record_id="42", fields={"name": "Alice", "age": 31})

        plan = builder.build_request(request)

        assert plan.pairs == [("name", "Alice"), ("age", 31)]

    def test_build_request_empty_fields(self, builder):
        """Test an UpdateRequest without fields is rejected."""
        with pytest.raises(InvalidRequest):
            builder.build_request(UpdateRequest(record_id="42"))


def test_placeholder_for():
    """Test placeholder sanitizing."""
    assert placeholder_for("name") == ":name"
    assert placeholder_for("user.email") == ":user_email"
    assert placeholder_for("a b-c") == ":a_b_c"
