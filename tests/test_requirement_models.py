"""Test requirement and template model behaviour without a database."""

from datetime import datetime

import pytest

from app.core.exceptions import GuardError, ValidationError
from app.models.enums import (
    RequirementCategory,
    RequirementNecessity,
    RequirementStatus,
    RequirementType,
    TemplateCategory,
)
from app.models.requirement import ApplicationRequirement
from app.models.requirements_template import RequirementsTemplate


def make_requirement(status=RequirementStatus.PENDING, **fields):
    defaults = {
        "requirement_type": RequirementType.OTHER,
        "category": RequirementCategory.ACADEMIC,
        "name": "Requirement",
        "is_required": True,
        "is_optional": False,
        "status": status,
    }
    defaults.update(fields)
    return ApplicationRequirement(**defaults)


def test_completing_stamps_submitted_at():
    requirement = make_requirement()

    requirement.update_status(RequirementStatus.COMPLETED, notes="Sent by mail")

    assert requirement.status == RequirementStatus.COMPLETED
    assert requirement.submitted_at is not None
    assert requirement.notes == "Sent by mail"
    assert requirement.is_complete


def test_completing_keeps_existing_submitted_at():
    submitted = datetime(2024, 1, 15, 9, 30)
    requirement = make_requirement(RequirementStatus.IN_PROGRESS, submitted_at=submitted)

    requirement.update_status(RequirementStatus.COMPLETED)

    assert requirement.submitted_at == submitted


def test_reopening_clears_timestamps():
    requirement = make_requirement(
        RequirementStatus.COMPLETED,
        submitted_at=datetime(2024, 1, 15),
        verified_at=datetime(2024, 1, 16),
    )

    requirement.update_status(RequirementStatus.PENDING)

    assert requirement.status == RequirementStatus.PENDING
    assert requirement.submitted_at is None
    assert requirement.verified_at is None
    assert not requirement.is_complete


@pytest.mark.parametrize("done", [
    RequirementStatus.COMPLETED,
    RequirementStatus.WAIVED,
    RequirementStatus.NOT_APPLICABLE,
])
def test_done_states_cannot_swap_for_each_other(done):
    requirement = make_requirement(done)
    others = {RequirementStatus.COMPLETED, RequirementStatus.WAIVED, RequirementStatus.NOT_APPLICABLE} - {done}

    for target in others:
        with pytest.raises(GuardError) as exc_info:
            requirement.update_status(target)
        assert f"from {done.value} to {target.value}" in str(exc_info.value)

    assert requirement.status == done


def test_same_status_only_updates_notes():
    requirement = make_requirement(RequirementStatus.WAIVED)

    requirement.update_status(RequirementStatus.WAIVED, notes="Waived by the department")

    assert requirement.status == RequirementStatus.WAIVED
    assert requirement.notes == "Waived by the department"


@pytest.mark.parametrize("is_required,is_optional,necessity", [
    (True, False, RequirementNecessity.REQUIRED),
    (False, True, RequirementNecessity.OPTIONAL),
    (False, False, RequirementNecessity.CONDITIONAL),
])
def test_necessity_from_flags(is_required, is_optional, necessity):
    requirement = make_requirement(is_required=is_required, is_optional=is_optional)
    assert requirement.necessity == necessity


def test_fee_details_payload():
    requirement = make_requirement(
        requirement_type=RequirementType.FEE,
        category=RequirementCategory.ADMINISTRATIVE,
        application_fee_amount=75,
        application_fee_currency=" usd ",
        application_fee_paid=False,
    )

    details = requirement.details

    assert details["kind"] == "fee"
    assert details["amount"] == 75
    assert details["currency"] == "USD"
    assert details["paid"] is False

    requirement.mark_fee_paid()
    assert requirement.details["paid"] is True
    assert requirement.application_fee_paid_at is not None


def test_other_details_payload_is_just_the_kind():
    assert make_requirement().details == {"kind": "other"}


def test_name_is_stripped():
    assert make_requirement(name="  GRE Scores  ").name == "GRE Scores"


def test_template_rejects_duplicate_blueprint_names():
    with pytest.raises(ValidationError) as exc_info:
        RequirementsTemplate(
            name="Duplicated",
            category=TemplateCategory.CUSTOM,
            requirements=[
                {"name": "Essay", "requirement_type": "other", "category": "personal", "order": 1},
                {"name": "Essay", "requirement_type": "other", "category": "personal", "order": 2},
            ],
        )
    assert "unique names" in str(exc_info.value)


def test_template_sorts_blueprints_by_order():
    template = RequirementsTemplate(
        name="Unordered",
        category=TemplateCategory.CUSTOM,
        requirements=[
            {"name": "Third", "order": 3, "is_required": True},
            {"name": "First", "order": 1, "is_required": False, "is_optional": True},
            {"name": "Second", "order": 2, "is_required": True, "category": "financial"},
        ],
    )

    assert [bp["name"] for bp in template.requirements] == ["First", "Second", "Third"]
    assert [bp["name"] for bp in template.required_requirements()] == ["Second", "Third"]
    assert [bp["name"] for bp in template.optional_requirements()] == ["First"]
    assert [bp["name"] for bp in template.requirements_by_category("financial")] == ["Second"]


def test_template_increment_usage():
    template = RequirementsTemplate(name="Counter", category=TemplateCategory.CUSTOM, usage_count=2)
    template.increment_usage()
    assert template.usage_count == 3
