"""
Read-only configuration consumed by the complaint workflow.

Values come from active `system_configs` rows when present and fall back
to application settings. Malformed rows are skipped, never fatal.
"""

import json
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from sqlalchemy.orm import Session

from civicdesk.config.settings import Settings, settings as default_settings
from civicdesk.core.exceptions import ValidationError
from civicdesk.core.logging import get_logger
from civicdesk.repositories.system.system_config_repository import SystemConfigRepository

logger = get_logger(__name__)

COMPLAINT_TYPE_PREFIX = "COMPLAINT_TYPE_"


@dataclass(frozen=True)
class SequenceFormat:
    """How complaint sequence codes are rendered, e.g. KSC + 0007."""
    prefix: str
    start_number: int
    pad_length: int

    def render(self, number: int) -> str:
        return f"{self.prefix}{str(number).zfill(self.pad_length)}"


@dataclass(frozen=True)
class ComplaintType:
    type_id: str
    name: str
    sla_hours: int


def parse_complaint_type(key: str, raw: str) -> Optional[ComplaintType]:
    """Parse a `COMPLAINT_TYPE_<ID>` row; None when the value is unusable."""
    type_id = key[len(COMPLAINT_TYPE_PREFIX):].strip().upper() if key.startswith(COMPLAINT_TYPE_PREFIX) else ""
    if not type_id:
        return None
    try:
        data = json.loads(raw or "{}")
        sla_hours = float(data.get("slaHours"))
    except (TypeError, ValueError, AttributeError):
        logger.warning("Ignoring malformed complaint type config", extra={"config_key": key})
        return None
    if not math.isfinite(sla_hours) or sla_hours <= 0:
        return None
    name = data.get("name") if isinstance(data.get("name"), str) else type_id
    return ComplaintType(type_id=type_id, name=name, sla_hours=int(sla_hours))


def _parse_int(raw: Optional[str], fallback: int, minimum: int = 0) -> int:
    if raw is None:
        return fallback
    try:
        value = int(str(raw).strip())
    except ValueError:
        return fallback
    return value if value >= minimum else fallback


def _parse_bool(raw: Optional[str], fallback: bool) -> bool:
    if raw is None:
        return fallback
    lowered = str(raw).strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    return fallback


class ConfigProvider(ABC):
    """Configuration the workflow reads; never written by it."""

    @abstractmethod
    def sequence_format(self) -> SequenceFormat:
        ...

    @abstractmethod
    def complaint_types(self) -> Dict[str, ComplaintType]:
        ...

    @abstractmethod
    def auto_assign_enabled(self) -> bool:
        ...

    @abstractmethod
    def default_sla_hours(self) -> int:
        ...

    @abstractmethod
    def otp_expiry_minutes(self) -> int:
        ...

    def resolve_type(self, type_key: Optional[str]) -> ComplaintType:
        """
        Look up a complaint type by id or display name, case-insensitively.

        With an empty catalogue any non-blank type is accepted under the
        default SLA hours.

        Raises:
            ValidationError: Blank or unconfigured type.
        """
        key = (type_key or "").strip().upper()
        if not key:
            raise ValidationError("Complaint type is required", field="type", rule="type_required")

        catalogue = self.complaint_types()
        if not catalogue:
            return ComplaintType(type_id=key, name=key, sla_hours=self.default_sla_hours())

        if key in catalogue:
            return catalogue[key]
        for complaint_type in catalogue.values():
            if complaint_type.name.strip().upper() == key:
                return complaint_type

        raise ValidationError(
            f"Unknown complaint type '{type_key}'",
            field="type",
            rule="type_configured",
        )


class StaticConfigProvider(ConfigProvider):
    """In-memory configuration, used for tests and embedded setups."""

    def __init__(
        self,
        *,
        sequence_format: Optional[SequenceFormat] = None,
        complaint_types: Optional[Mapping[str, int]] = None,
        auto_assign: bool = True,
        default_sla_hours: int = 48,
        otp_expiry_minutes: int = 10,
    ):
        self._sequence_format = sequence_format or SequenceFormat("KSC", 1, 4)
        self._types = {
            type_id.upper(): ComplaintType(type_id=type_id.upper(), name=type_id.upper(), sla_hours=hours)
            for type_id, hours in (complaint_types or {}).items()
        }
        self._auto_assign = auto_assign
        self._default_sla_hours = default_sla_hours
        self._otp_expiry_minutes = otp_expiry_minutes

    def sequence_format(self) -> SequenceFormat:
        return self._sequence_format

    def complaint_types(self) -> Dict[str, ComplaintType]:
        return dict(self._types)

    def auto_assign_enabled(self) -> bool:
        return self._auto_assign

    def default_sla_hours(self) -> int:
        return self._default_sla_hours

    def otp_expiry_minutes(self) -> int:
        return self._otp_expiry_minutes


class DatabaseConfigProvider(ConfigProvider):
    """
    Reads the `system_configs` table on every call, so changes made by
    administrators take effect without a restart.
    """

    def __init__(self, session: Session, app_settings: Optional[Settings] = None):
        self.repository = SystemConfigRepository(session)
        self.settings = app_settings or default_settings

    def sequence_format(self) -> SequenceFormat:
        prefix = (self.repository.get_value("COMPLAINT_ID_PREFIX") or "").strip().upper()
        return SequenceFormat(
            prefix=prefix or self.settings.COMPLAINT_ID_PREFIX,
            start_number=_parse_int(
                self.repository.get_value("COMPLAINT_ID_START_NUMBER"),
                self.settings.COMPLAINT_ID_START_NUMBER,
            ),
            pad_length=_parse_int(
                self.repository.get_value("COMPLAINT_ID_LENGTH"),
                self.settings.COMPLAINT_ID_LENGTH,
                minimum=1,
            ),
        )

    def complaint_types(self) -> Dict[str, ComplaintType]:
        types: Dict[str, ComplaintType] = {}
        for key, value in self.repository.get_values_with_prefix(COMPLAINT_TYPE_PREFIX).items():
            complaint_type = parse_complaint_type(key, value)
            if complaint_type is not None:
                types[complaint_type.type_id] = complaint_type
        return types

    def auto_assign_enabled(self) -> bool:
        return _parse_bool(
            self.repository.get_value("AUTO_ASSIGN_COMPLAINTS"),
            self.settings.AUTO_ASSIGN_COMPLAINTS,
        )

    def default_sla_hours(self) -> int:
        return _parse_int(
            self.repository.get_value("DEFAULT_SLA_HOURS"),
            self.settings.DEFAULT_SLA_HOURS,
            minimum=1,
        )

    def otp_expiry_minutes(self) -> int:
        return _parse_int(
            self.repository.get_value("OTP_EXPIRY_MINUTES"),
            self.settings.OTP_EXPIRY_MINUTES,
            minimum=1,
        )
