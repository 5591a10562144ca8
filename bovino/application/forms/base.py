from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Mapping

from bovino.application.errors import ValidationError
from bovino.application.forms.error_routing import (
    ErrorRule,
    permission_rule,
    route_error,
    validation_rule,
)
from bovino.application.forms.fields import FieldSpec, FormState, Option
from bovino.application.result import Result
from bovino.application.stores.entity_store import EntityStore
from bovino.interfaces.http.schemas.base import Record

if TYPE_CHECKING:
    from bovino.application.context import AppContext

logger = logging.getLogger(__name__)

INVALID_FORM_MESSAGE = "Por favor, complete todos los campos requeridos"
LOAD_ERROR_MESSAGE = "Error al cargar los datos necesarios"
BUSY_MESSAGE = "El formulario ya se está enviando"

SuccessCallback = Callable[[Any], Any]


class EntityForm:
    """Headless create/edit form bound to one entity store.

    Subclasses declare `fields` (name -> `FieldSpec`), the context attribute of
    the target store, the stores to load on `mount()` and the keyword rules
    used to place server errors.
    """

    store_name: ClassVar[str] = ""
    fields: ClassVar[dict[str, FieldSpec]] = {}
    dependencies: ClassVar[tuple[str, ...]] = ()
    error_rules: ClassVar[tuple[ErrorRule, ...]] = ()
    code_fields: ClassVar[dict[str, ErrorRule]] = {}
    managed_label: ClassVar[str | None] = None

    def __init__(
        self,
        context: AppContext,
        record: Record | None = None,
        *,
        on_success: SuccessCallback | None = None,
    ) -> None:
        self.context = context
        self.record = record
        self.on_success = on_success
        self.state = FormState.EDITING
        self.field_errors: dict[str, str] = {}
        self.form_error: str | None = None
        self.values: dict[str, Any] = self.initial_values()

    def __repr__(self) -> str:
        mode = "edit" if self.is_editing else "create"
        return f"<{type(self).__name__} mode={mode} state={self.state.value}>"

    @property
    def store(self) -> EntityStore:
        return getattr(self.context, self.store_name)

    @property
    def is_editing(self) -> bool:
        return self.record is not None

    @property
    def submitting(self) -> bool:
        return self.state is FormState.SUBMITTING

    # -- values ------------------------------------------------------------

    def defaults(self) -> dict[str, Any]:
        return {name: spec.initial() for name, spec in self.fields.items()}

    def initial_values(self) -> dict[str, Any]:
        values = self.defaults()
        if self.record is not None:
            for name, spec in self.fields.items():
                values[name] = spec.seed(self.record.get(name))
        return values

    def set_value(self, name: str, value: Any) -> None:
        if name not in self.fields:
            raise KeyError(name)
        self.values[name] = value
        self.field_errors.pop(name, None)
        if self.state is FormState.SUCCESS:
            self.state = FormState.EDITING

    def reset(self) -> None:
        self.values = self.defaults()
        self.field_errors = {}
        self.form_error = None

    async def mount(self) -> bool:
        """Load every store the form draws options from."""
        ok = True
        for name in self.dependencies:
            result = await getattr(self.context, name).fetch_all()
            ok = ok and result.success
        ok = await self.load_extra() and ok
        if not ok:
            self.form_error = LOAD_ERROR_MESSAGE
        return ok

    async def load_extra(self) -> bool:
        """Hook for one-off lookups (units, parent types) that live outside the stores."""
        return True

    def options(self) -> dict[str, list[Option]]:
        return {}

    # -- validation --------------------------------------------------------

    def clean(self, values: Mapping[str, Any]) -> dict[str, str]:
        """Cross-field rules; returns field -> message."""
        return {}

    def validate(self) -> bool:
        errors: dict[str, str] = {}
        for name, spec in self.fields.items():
            message = spec.validate(self.values.get(name), self.values)
            if message:
                errors[name] = message
        for name, message in self.clean(self.values).items():
            errors.setdefault(name, message)
        self.field_errors = errors
        return not errors

    def to_payload(self) -> dict[str, Any]:
        return {
            name: spec.to_wire(self.values.get(name))
            for name, spec in self.fields.items()
            if spec.send
        }

    # -- submission --------------------------------------------------------

    async def save(self, payload: dict[str, Any]) -> Result:
        if self.is_editing:
            return await self.store.update(self.record.pk, payload)
        return await self.store.create(payload)

    def invalid(self, message: str = INVALID_FORM_MESSAGE) -> Result:
        self.form_error = message
        return Result.fail(message, code=ValidationError.code)

    def before_submit(self) -> str | None:
        """Form-level check run after field validation; returns a banner message."""
        return None

    async def verify(self) -> str | None:
        """Server-side pre-check run while submitting; returns a banner message."""
        return None

    async def submit(self) -> Result:
        if self.state is FormState.SUBMITTING:
            logger.debug("Ignoring submit while submitting: %s", type(self).__name__)
            return Result.fail(BUSY_MESSAGE, code="busy")

        self.form_error = None
        self.field_errors = {}
        if not self.validate():
            return self.invalid()
        blocked = self.before_submit()
        if blocked:
            return self.invalid(blocked)

        self.state = FormState.SUBMITTING
        try:
            blocked = await self.verify()
            if blocked is None:
                result = await self.save(self.to_payload())
        finally:
            self.state = FormState.EDITING
        if blocked is not None:
            return self.invalid(blocked)

        if not result.success:
            routed = route_error(
                result,
                fields=self.fields.keys(),
                rules=self.rules(),
                code_fields=self.code_fields,
            )
            self.form_error = routed.form_error
            self.field_errors = routed.field_errors
            logger.info("%s rejected: %s", type(self).__name__, result.error)
            return result

        self.reset()
        self.state = FormState.SUCCESS
        if self.on_success is not None:
            outcome = self.on_success(result.data)
            if inspect.isawaitable(outcome):
                await outcome
        return result

    def rules(self) -> tuple[ErrorRule, ...]:
        return (validation_rule(), *self.error_rules, permission_rule(self.managed_label))
