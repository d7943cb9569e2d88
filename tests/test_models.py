"""
Tests for data models.
"""

import pytest
from pydantic import ValidationError

from items_service.models import Assignment, UpdatePlan
from items_service.update_builder import PartialUpdateBuilder


def build(fields):
    return PartialUpdateBuilder().build("42", fields)


class TestAssignment:
    """Tests for Assignment model."""

    def test_name_alias(self):
        """Test the alias mirrors the placeholder."""
        assignment = Assignment(placeholder=":first_name", field="first-name", value="Al")

        assert assignment.name_alias == "#first_name"

    def test_needs_alias(self):
        """Test which field names cannot be written bare."""
        assert Assignment(placeholder=":a", field="color").needs_alias() is False
        assert Assignment(placeholder=":a", field="name", reserved=True).needs_alias() is True
        assert Assignment(placeholder=":a", field="first-name").needs_alias() is True
        assert Assignment(placeholder=":a", field="1st").needs_alias() is True

    def test_frozen(self):
        """Test assignments cannot be mutated."""
        assignment = Assignment(placeholder=":a", field="a", value=1)

        with pytest.raises(ValidationError):
            assignment.value = 2


class TestUpdatePlanRendering:
    """Tests for UpdatePlan.to_update_kwargs."""

    def test_render_plain(self):
        """Test rendering without aliasing."""
        kwargs = build({"color": "red", "size": 3}).to_update_kwargs("itemId")

        assert kwargs == {
            "Key": {"itemId": "42"},
            "UpdateExpression": "set color = :color, size = :size",
            "ExpressionAttributeValues": {":color": "red", ":size": 3},
            "ReturnValues": "UPDATED_NEW",
        }

    def test_render_single_field(self):
        """Test a single assignment has no separator."""
        kwargs = build({"color": "red"}).to_update_kwargs("itemId")

        assert kwargs["UpdateExpression"] == "set color = :color"

    def test_reserved_rendered_raw_without_escaping(self):
        """Test reserved names are left bare when escaping is off."""
        kwargs = build({"name": "Alice"}).to_update_kwargs("itemId")

        assert kwargs["UpdateExpression"] == "set name = :name"
        assert "ExpressionAttributeNames" not in kwargs

    def test_reserved_aliased_with_escaping(self):
        """Test reserved names go through ExpressionAttributeNames."""
        kwargs = build({"name": "Alice", "color": "red"}).to_update_kwargs(
            "itemId",
            escape_reserved=True,
        )

        assert kwargs["UpdateExpression"] == "set #name = :name, color = :color"
        assert kwargs["ExpressionAttributeNames"] == {"#name": "name"}
        assert kwargs["ExpressionAttributeValues"] == {":name": "Alice", ":color": "red"}

    def test_unsafe_names_aliased_with_escaping(self):
        """Test names with punctuation are aliased rather than parsed as paths."""
        kwargs = build({"user.email": "a@b.c"}).to_update_kwargs("itemId", escape_reserved=True)

        assert kwargs["UpdateExpression"] == "set #user_email = :user_email"
        assert kwargs["ExpressionAttributeNames"] == {"#user_email": "user.email"}

    def test_expression_follows_plan_order(self):
        """Test clause order equals assignment order."""
        plan = build({"c": 1, "a": 2, "b": 3})

        kwargs = plan.to_update_kwargs("pk")

        assert kwargs["UpdateExpression"] == "set c = :c, a = :a, b = :b"
        assert list(kwargs["ExpressionAttributeValues"]) == [":c", ":a", ":b"]

    def test_plan_is_frozen(self):
        """Test a plan cannot be altered after building."""
        plan = build({"color": "red"})

        with pytest.raises(ValidationError):
            plan.record_id = "other"

    def test_plan_properties(self):
        """Test convenience accessors."""
        plan = UpdatePlan(
            record_id="42",
            assignments=(
                Assignment(placeholder=":name", field="name", value="Alice", reserved=True),
                Assignment(placeholder=":age", field="age", value=31),
            ),
        )

        assert plan.fields == ["name", "age"]
        assert plan.pairs == [("name", "Alice"), ("age", 31)]
        assert plan.reserved_fields == ["name"]
