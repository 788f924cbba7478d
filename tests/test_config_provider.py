from __future__ import annotations

import pytest

from civicdesk.core.exceptions import ValidationError
from civicdesk.models.system.system_config import SystemConfig
from civicdesk.services.base.service_result import ErrorCode
from civicdesk.services.complaint.workflow_service import WorkflowService
from civicdesk.services.system.config_provider import (
    DatabaseConfigProvider,
    StaticConfigProvider,
    parse_complaint_type,
)

from .conftest import complaint_data


def _rows(db_session, **values) -> None:
    db_session.add_all([SystemConfig(key=key, value=value) for key, value in values.items()])
    db_session.commit()


def test_parse_complaint_type() -> None:
    parsed = parse_complaint_type("COMPLAINT_TYPE_WATER_SUPPLY", '{"name": "Water Supply", "slaHours": 24}')
    assert parsed.type_id == "WATER_SUPPLY"
    assert parsed.name == "Water Supply"
    assert parsed.sla_hours == 24


@pytest.mark.parametrize(
    "raw",
    ["not json", '{"name": "X"}', '{"slaHours": -1}', '{"slaHours": "NaN"}', '{"slaHours": 0}'],
)
def test_malformed_complaint_type_skipped(raw) -> None:
    assert parse_complaint_type("COMPLAINT_TYPE_X", raw) is None


def test_database_provider_falls_back_to_settings(db_session) -> None:
    provider = DatabaseConfigProvider(db_session)
    fmt = provider.sequence_format()

    assert fmt.prefix == provider.settings.COMPLAINT_ID_PREFIX
    assert fmt.pad_length == provider.settings.COMPLAINT_ID_LENGTH
    assert provider.complaint_types() == {}
    assert provider.auto_assign_enabled() is provider.settings.AUTO_ASSIGN_COMPLAINTS


def test_database_provider_reads_rows(db_session) -> None:
    _rows(
        db_session,
        COMPLAINT_ID_PREFIX="wd",
        COMPLAINT_ID_START_NUMBER="500",
        COMPLAINT_ID_LENGTH="6",
        AUTO_ASSIGN_COMPLAINTS="false",
        DEFAULT_SLA_HOURS="abc",
        COMPLAINT_TYPE_ROAD_DAMAGE='{"name": "Road Damage", "slaHours": 96}',
        COMPLAINT_TYPE_BROKEN='{"name": "Broken"}',
    )
    provider = DatabaseConfigProvider(db_session)

    assert provider.sequence_format().render(500) == "WD000500"
    assert provider.auto_assign_enabled() is False
    assert provider.default_sla_hours() == provider.settings.DEFAULT_SLA_HOURS
    assert set(provider.complaint_types()) == {"ROAD_DAMAGE"}


def test_inactive_rows_ignored(db_session) -> None:
    db_session.add(SystemConfig(key="COMPLAINT_ID_PREFIX", value="ZZ", is_active=False))
    db_session.commit()

    assert DatabaseConfigProvider(db_session).sequence_format().prefix != "ZZ"


def test_resolve_type_by_id_or_name(db_session) -> None:
    _rows(db_session, COMPLAINT_TYPE_ROAD_DAMAGE='{"name": "Road Damage", "slaHours": 96}')
    provider = DatabaseConfigProvider(db_session)

    assert provider.resolve_type("road_damage").sla_hours == 96
    assert provider.resolve_type("Road Damage").type_id == "ROAD_DAMAGE"
    with pytest.raises(ValidationError) as exc:
        provider.resolve_type("GARBAGE")
    assert exc.value.rule == "type_configured"


def test_empty_catalogue_accepts_any_type() -> None:
    provider = StaticConfigProvider(default_sla_hours=36)
    complaint_type = provider.resolve_type("noise")

    assert complaint_type.type_id == "NOISE"
    assert complaint_type.sla_hours == 36
    with pytest.raises(ValidationError):
        provider.resolve_type("   ")


def test_unknown_type_refuses_create(workflow, seed) -> None:
    result = workflow.create_complaint(complaint_data(seed.ward.id, type="GARBAGE"), seed.principal(seed.citizen))

    assert result.error_code == ErrorCode.VALIDATION_ERROR
    assert result.error.field == "type"


def test_inactive_ward_refuses_create(workflow, seed, db_session) -> None:
    seed.ward.is_active = False
    db_session.commit()

    result = workflow.create_complaint(complaint_data(seed.ward.id), seed.principal(seed.citizen))

    assert result.error.rule == "ward_active"


def test_configured_prefix_used_for_codes(db_session, seed, dispatcher, captcha, clock) -> None:
    _rows(db_session, COMPLAINT_ID_PREFIX="WD", COMPLAINT_ID_START_NUMBER="42", COMPLAINT_ID_LENGTH="3")
    workflow = WorkflowService(db_session, dispatcher=dispatcher, captcha=captcha, clock=clock)

    result = workflow.create_complaint(complaint_data(seed.ward.id), seed.principal(seed.citizen))

    assert result.data.sequence_code == "WD042"
