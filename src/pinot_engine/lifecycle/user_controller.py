"""
User lifecycle, keyed by (username, component).

Notes
-----
- The controller never returns passwords; the locally held password is
  carried forward through every read.
- Table and permission lists are compared as sets. When a read returns the
  same members in another order, the previously stored order is kept.
- A create is followed by a re-read; when that re-read fails, the values just
  sent are kept and a WARNING diagnostic is returned.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.enums import ResourceKind
from src.logger import LOGGER
from src.pinot_engine.desired.models import DesiredUser
from src.pinot_engine.errors import NotFoundError, PinotEngineError, ValidationError
from src.pinot_engine.identifiers import normalize_component, parse_user_import_id
from src.pinot_engine.lifecycle.ports import ControllerApi, OperationResult
from src.pinot_engine.state.states import UserState
from src.pinot_engine.users import UserRecord, extract_user_record, same_members
from src.pinot_engine.validation.diagnostics import Diagnostic, DiagnosticLevel

USER_READ_AFTER_CREATE_FAILED = "USER_READ_AFTER_CREATE_FAILED"


class UserController:
    kind = ResourceKind.USER

    def __init__(self, client: ControllerApi) -> None:
        self._client = client

    def create(self, desired: DesiredUser) -> OperationResult[UserState]:
        if not desired.password:
            raise ValidationError("Creating a Pinot user requires a non-empty password.")
        record = self._record(desired)
        self._client.create_user(record.to_payload())
        LOGGER.info("Created user %s on %s", record.username, record.component)

        sent = self._state_from_record(record, password=desired.password)
        try:
            observed = self.read(sent)
        except PinotEngineError as e:
            message = f"Created user {sent.resource_key} but reading it back failed: {e}"
            LOGGER.warning("%s", message)
            warning = Diagnostic(
                resource_key=sent.resource_key,
                level=DiagnosticLevel.WARNING,
                code=USER_READ_AFTER_CREATE_FAILED,
                message=message,
            )
            return OperationResult(state=sent, diagnostics=(warning,))
        return OperationResult(state=observed or sent)

    def read(self, current: UserState) -> UserState | None:
        try:
            raw = self._client.get_user(current.username, current.component)
        except NotFoundError:
            return None
        record = extract_user_record(raw, current.username, current.component)
        if record is None:
            return None
        return UserState(
            username=record.username or current.username,
            component=record.component or current.component,
            role=record.role,
            tables=_keep_order(current.tables, record.tables),
            permissions=_keep_order(current.permissions, record.permissions),
            password=current.password,
        )

    def update(self, desired: DesiredUser, current: UserState) -> OperationResult[UserState]:
        record = self._record(desired)
        # Without a password the controller keeps the current one.
        self._client.update_user(record.to_payload(include_password=bool(desired.password)))
        LOGGER.info("Updated user %s on %s", record.username, record.component)
        password = desired.password or current.password
        return OperationResult(state=self._state_from_record(record, password=password))

    def delete(self, current: UserState) -> None:
        self._client.delete_user(current.username, current.component)
        LOGGER.info("Deleted user %s on %s", current.username, current.component)

    def import_(self, resource_id: str) -> UserState:
        username, component = parse_user_import_id(resource_id)
        state = self.read(UserState(username=username, component=component.value))
        if state is None:
            raise NotFoundError(f"user {resource_id!r} not found on the controller", status=404)
        return state

    # ---------- helpers ----------

    @staticmethod
    def _record(desired: DesiredUser) -> UserRecord:
        return UserRecord(
            username=desired.username,
            component=normalize_component(desired.component).value,
            role=desired.role,
            tables=tuple(desired.tables),
            permissions=tuple(desired.permissions),
            password=desired.password,
        )

    @staticmethod
    def _state_from_record(record: UserRecord, password: str | None) -> UserState:
        return UserState(
            username=record.username,
            component=record.component,
            role=record.role,
            tables=record.tables,
            permissions=record.permissions,
            password=password,
        )


def _keep_order(previous: Sequence[str], observed: Sequence[str]) -> tuple[str, ...]:
    if same_members(previous, observed):
        return tuple(previous)
    return tuple(observed)
