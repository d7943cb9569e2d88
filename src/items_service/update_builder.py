"""
Partial update construction.

Turns a record id plus a mapping of changed fields into an UpdatePlan.
The builder never touches the backend; callers render the plan with
``UpdatePlan.to_update_kwargs`` and execute it themselves.
"""

import re
from collections.abc import Mapping
from typing import Any

import structlog

from items_service.errors import MISSING_ID_MESSAGE, NO_ARGUMENTS_MESSAGE, InvalidRequest
from items_service.models import Assignment, UpdatePlan, UpdateRequest
from items_service.reserved_words import is_reserved_word

logger = structlog.get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]")


def placeholder_for(field: str) -> str:
    """Base placeholder for a field name, e.g. ``first-name`` -> ``:first_name``."""
    return ":" + _UNSAFE_CHARS.sub("_", field)


class PartialUpdateBuilder:
    """
    Builds update plans from sparse field changes.

    Stateless; one instance can be shared by any number of callers.
    """

    def build(self, record_id: str, fields: Mapping[str, Any] | None) -> UpdatePlan:
        """
        Build an update plan.

        Args:
            record_id: Identifier of the record to update
            fields: Field name to new value, in the order to apply them

        Returns:
            UpdatePlan with one assignment per field

        Raises:
            InvalidRequest: If the record id or the field mapping is empty
        """
        if not record_id or not str(record_id).strip():
            raise InvalidRequest(MISSING_ID_MESSAGE)
        if not fields:
            raise InvalidRequest(NO_ARGUMENTS_MESSAGE)

        used: set[str] = set()
        assignments = []
        for field, value in fields.items():
            if not field:
                raise InvalidRequest("invalid request, field names must not be empty")

            base = placeholder_for(field)
            placeholder = base
            suffix = 2
            while placeholder in used:
                placeholder = f"{base}_{suffix}"
                suffix += 1
            used.add(placeholder)

            assignments.append(
                Assignment(
                    placeholder=placeholder,
                    field=field,
                    value=value,
                    reserved=is_reserved_word(field),
                )
            )

        plan = UpdatePlan(record_id=record_id, assignments=tuple(assignments))
        if plan.reserved_fields:
            logger.debug(
                "Update plan uses reserved words",
                record_id=record_id,
                fields=plan.reserved_fields,
            )
        return plan

    def build_request(self, request: UpdateRequest) -> UpdatePlan:
        """Build a plan from an UpdateRequest model."""
        return self.build(request.record_id, request.fields)
