# File: standins/services.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19
"""
Create, change and cancel stand-in delegations.

Rules (same for create and update):
  - no delegating to oneself
  - start_date <= end_date
  - end_date not in the past
  - no other ACTIVE delegation of the same supervisor overlapping the range
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from timesheets.exceptions import ValidationError

from .models import DelegationStatus, StandinDelegation

logger = logging.getLogger("standins")


def _validate(supervisor_id: int, standin_id: int, start: date, end: date, *, today: date,
              exclude_pk: Optional[int] = None) -> None:
    errors = {}
    if supervisor_id == standin_id:
        errors["standin"] = [str(_("A supervisor cannot delegate to themselves."))]
    if start > end:
        errors["end_date"] = [str(_("End date must be on or after the start date."))]
    elif end < today:
        errors["end_date"] = [str(_("The delegation would already have ended."))]
    if errors:
        raise ValidationError(errors)

    overlapping = StandinDelegation.objects.overlapping(supervisor_id, start, end)
    if exclude_pk is not None:
        overlapping = overlapping.exclude(pk=exclude_pk)
    if overlapping.exists():
        raise ValidationError({"start_date": [str(_("An active delegation already covers part of this period."))]})


def create_delegation(supervisor, standin, start_date: date, end_date: date, *, reason: str = "",
                      today: Optional[date] = None) -> StandinDelegation:
    today = today or timezone.localdate()
    with transaction.atomic():
        _validate(supervisor.pk, standin.pk, start_date, end_date, today=today)
        obj = StandinDelegation(
            supervisor=supervisor, standin=standin, start_date=start_date, end_date=end_date,
            reason=reason or "",
        )
        obj.full_clean()
        obj.save()
    logger.info(f"Delegation {obj.pk} created: {supervisor.pk} → {standin.pk} {start_date}..{end_date}")
    return obj


def update_delegation(delegation: StandinDelegation, *, standin=None, start_date: Optional[date] = None,
                      end_date: Optional[date] = None, reason: Optional[str] = None,
                      today: Optional[date] = None) -> StandinDelegation:
    if delegation.status != DelegationStatus.ACTIVE:
        raise ValidationError({"status": [str(_("Only active delegations can be changed."))]})
    today = today or timezone.localdate()
    if standin is not None:
        delegation.standin = standin
    if start_date is not None:
        delegation.start_date = start_date
    if end_date is not None:
        delegation.end_date = end_date
    if reason is not None:
        delegation.reason = reason
    with transaction.atomic():
        _validate(
            delegation.supervisor_id, delegation.standin_id, delegation.start_date, delegation.end_date,
            today=today, exclude_pk=delegation.pk,
        )
        delegation.full_clean()
        delegation.save()
    logger.info(f"Delegation {delegation.pk} updated")
    return delegation


def cancel_delegation(delegation: StandinDelegation, *, by=None) -> StandinDelegation:
    """Set CANCELLED. Only the delegating supervisor may cancel when `by` is given."""
    if by is not None and by.pk != delegation.supervisor_id:
        raise PermissionDenied(_("Only the delegating supervisor can cancel this delegation."))
    if delegation.status == DelegationStatus.CANCELLED:
        return delegation
    delegation.status = DelegationStatus.CANCELLED
    delegation.save()
    logger.info(f"Delegation {delegation.pk} cancelled")
    return delegation


def delegations_for(supervisor, *, include_cancelled: bool = True):
    qs = StandinDelegation.objects.filter(supervisor=supervisor).select_related("standin")
    if not include_cancelled:
        qs = qs.exclude(status=DelegationStatus.CANCELLED)
    return qs


def approvals_for(supervisor):
    """Decisions stand-ins recorded on this supervisor's behalf, newest first."""
    from timesheets.models import ApprovalRecord
    return (
        ApprovalRecord.objects
        .filter(acting_on_behalf_of=supervisor)
        .select_related("timesheet__employee__person", "acting_identity")
        .order_by("-timestamp", "-id")
    )
