"""
Data models for the Items Service.

Defines Pydantic models for partial update requests and the update plans
built from them.
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_BARE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class UpdateRequest(BaseModel):
    """A sparse set of field changes for one record."""

    record_id: str
    fields: dict[str, Any] = Field(default_factory=dict)


class Assignment(BaseModel):
    """A single ``field = :placeholder`` clause of an update."""

    model_config = ConfigDict(frozen=True)

    placeholder: str
    field: str
    value: Any = None
    reserved: bool = False

    @property
    def name_alias(self) -> str:
        """Attribute-name alias sharing the placeholder's suffix."""
        return "#" + self.placeholder[1:]

    def needs_alias(self) -> bool:
        """True if the field cannot be written bare in an expression."""
        return self.reserved or not _BARE_NAME.match(self.field)


class UpdatePlan(BaseModel):
    """
    Ordered, backend-agnostic description of a partial update.

    Holds one assignment per requested field, in request order. Fields not
    listed here are left untouched by the update.
    """

    model_config = ConfigDict(frozen=True)

    record_id: str
    assignments: tuple[Assignment, ...]

    @property
    def fields(self) -> list[str]:
        return [a.field for a in self.assignments]

    @property
    def pairs(self) -> list[tuple[str, Any]]:
        """(field, value) pairs in plan order."""
        return [(a.field, a.value) for a in self.assignments]

    @property
    def reserved_fields(self) -> list[str]:
        return [a.field for a in self.assignments if a.reserved]

    def to_update_kwargs(self, key_name: str, escape_reserved: bool = False) -> dict[str, Any]:
        """
        Render the plan as keyword arguments for ``Table.update_item``.

        Args:
            key_name: Partition key attribute name of the table
            escape_reserved: Alias reserved or non-identifier field names
                through ``ExpressionAttributeNames``

        Returns:
            Keyword arguments including Key, UpdateExpression and the
            placeholder value table
        """
        clauses = []
        values: dict[str, Any] = {}
        names: dict[str, str] = {}

        for assignment in self.assignments:
            target = assignment.field
            if escape_reserved and assignment.needs_alias():
                target = assignment.name_alias
                names[target] = assignment.field
            clauses.append(f"{target} = {assignment.placeholder}")
            values[assignment.placeholder] = assignment.value

        kwargs: dict[str, Any] = {
            "Key": {key_name: self.record_id},
            "UpdateExpression": "set " + ", ".join(clauses),
            "ExpressionAttributeValues": values,
            "ReturnValues": "UPDATED_NEW",
        }
        if names:
            kwargs["ExpressionAttributeNames"] = names
        return kwargs
