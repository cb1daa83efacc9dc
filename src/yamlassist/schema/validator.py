"""Compiled schema validators and the queue that serializes their use."""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError as JSONSchemaError
from jsonschema.validators import validator_for

from yamlassist.models.errors import LintError
from yamlassist.parser.annotated import AnnotatedNode, node_at_path
from yamlassist.schema.registry import Schema, SchemaRegistry

logger = logging.getLogger("yamlassist.schema")

T = TypeVar("T")

_ERROR_CODES = {
    "type": "INVALID_TYPE",
    "required": "MISSING_PROPERTY",
    "additionalProperties": "UNKNOWN_PROPERTY",
    "enum": "INVALID_VALUE",
    "const": "INVALID_VALUE",
    "anyOf": "NO_MATCHING_ALTERNATIVE",
    "oneOf": "NO_MATCHING_ALTERNATIVE",
    "pattern": "PATTERN_MISMATCH",
}


def _format_path(path: list[Any]) -> str | None:
    if not path:
        return None
    return ".".join(str(p) for p in path)


class SchemaValidator:
    """A compiled validator for one schema.

    Raises ``jsonschema.exceptions.SchemaError`` at construction when the
    definition itself is malformed.  Errors of the running validation are
    collected on the instance, so one validator must never serve two
    validations at once; see :class:`ValidatorQueue`.
    """

    def __init__(self, schema: Schema) -> None:
        cls = validator_for(schema.definition, default=Draft7Validator)
        cls.check_schema(schema.definition)
        self.schema = schema
        self._validator = cls(schema.definition, format_checker=cls.FORMAT_CHECKER)
        self._errors: list[LintError] = []
        self.validation_count = 0

    @property
    def errors(self) -> list[LintError]:
        """Errors collected by the validation in progress (or the last one)."""
        return list(self._errors)

    def validate_parse(self, annotation: AnnotatedNode) -> list[LintError]:
        """Validate an annotated value; errors are in root-document coordinates."""
        self._errors = []
        for error in self._validator.iter_errors(annotation.value):
            self._report(annotation, error)
        self.validation_count += 1
        self._errors.sort(key=lambda e: (e.start_row, e.start_column, e.message))
        return list(self._errors)

    def _report(self, root: AnnotatedNode, error: JSONSchemaError) -> None:
        path = list(error.absolute_path)
        code = _ERROR_CODES.get(str(error.validator), "SCHEMA_VIOLATION")
        if error.validator == "additionalProperties" and isinstance(error.instance, dict):
            for extra in self._extra_keys(error):
                node = node_at_path(root, [*path, extra], key=True)
                self._add(node, f"property '{extra}' is not allowed here", [*path, extra], code)
            return
        self._add(node_at_path(root, path), error.message, path, code)

    @staticmethod
    def _extra_keys(error: JSONSchemaError) -> list[str]:
        schema = error.schema if isinstance(error.schema, dict) else {}
        properties = schema.get("properties", {})
        patterns = schema.get("patternProperties", {})
        return [
            key
            for key in error.instance
            if key not in properties and not any(re.search(p, key) for p in patterns)
        ]

    def _add(self, node: AnnotatedNode, message: str, path: list[Any], code: str) -> None:
        start_row, start_col, end_row, end_col = node.root_span()
        self._errors.append(
            LintError(
                start_row=start_row,
                start_column=start_col,
                end_row=end_row,
                end_column=end_col,
                message=message,
                path=_format_path(path),
                code=code,
            )
        )


class ValidatorQueue:
    """Owns compiled validators and grants exclusive use per schema.

    Calls for the same schema run one at a time in arrival order (an
    ``asyncio.Lock`` per schema name); calls for different schemas do not
    wait on each other.  Validators compile lazily, once per schema.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry = registry
        self._validators: dict[str, SchemaValidator] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    async def with_validator(
        self,
        schema: Schema,
        fn: Callable[[SchemaValidator], T | Awaitable[T]],
    ) -> T:
        """Run *fn* with exclusive use of *schema*'s compiled validator.

        Raises :class:`UnknownSchemaError` if the schema is not registered.
        """
        registered = self._registry.get(schema.name)
        async with self._lock_for(registered.name):
            validator = self._validators.get(registered.name)
            if validator is None:
                logger.info("compiling validator for schema '%s'", registered.name)
                validator = SchemaValidator(registered)
                self._validators[registered.name] = validator
            result = fn(validator)
            if inspect.isawaitable(result):
                result = await result
            return result  # type: ignore[return-value]

    async def warm(self) -> None:
        """Compile a validator for every registered schema."""
        for name in self._registry.names():
            await self.with_validator(self._registry.get(name), lambda _validator: None)

    def compiled(self) -> list[str]:
        return sorted(self._validators)
