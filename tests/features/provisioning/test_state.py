"""
Tests for tenant status transitions and saga checkpoints.
"""
import pytest

from storeforge.core.features.provisioning.errors import InvalidTransitionError
from storeforge.core.features.provisioning.state import (
    SagaStep,
    check_transition,
    is_done,
    step_index,
)
from storeforge.core.features.tenants.db.orm import TenantStatus


@pytest.mark.parametrize("target", [
    TenantStatus.ACTIVE,
    TenantStatus.FAILED,
    TenantStatus.INACTIVE,
])
def test_creating_moves_forward(target):
    check_transition(TenantStatus.CREATING, target)


@pytest.mark.parametrize("current, target", [
    (TenantStatus.ACTIVE, TenantStatus.CREATING),
    (TenantStatus.ACTIVE, TenantStatus.INACTIVE),
    (TenantStatus.FAILED, TenantStatus.ACTIVE),
    (TenantStatus.INACTIVE, TenantStatus.ACTIVE),
    (TenantStatus.CREATING, TenantStatus.CREATING),
])
def test_disallowed_transitions(current, target):
    with pytest.raises(InvalidTransitionError):
        check_transition(current, target)


def test_accepts_raw_status_values():
    check_transition("creating", TenantStatus.ACTIVE)
    with pytest.raises(InvalidTransitionError):
        check_transition("failed", TenantStatus.INACTIVE)


def test_step_order():
    assert step_index(None) == -1
    assert step_index(SagaStep.TENANT_CREATED) == 0
    assert step_index("activated") == len(SagaStep) - 1
    assert step_index(SagaStep.OWNER_BOOTSTRAPPED) < step_index(SagaStep.VENDOR_ENSURED)


def test_is_done():
    assert is_done("vendor_ensured", SagaStep.OWNER_BOOTSTRAPPED)
    assert is_done("vendor_ensured", SagaStep.VENDOR_ENSURED)
    assert not is_done("vendor_ensured", SagaStep.STOREFRONT_ENSURED)
    assert not is_done(None, SagaStep.TENANT_CREATED)
