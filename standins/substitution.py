# File: standins/substitution.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19
"""
Who actually decides on a timesheet today.

A supervisor with an active stand-in delegation covering today is replaced by
the stand-in, and the decision is recorded on the supervisor's behalf.
Two or more active delegations covering the same day are a data problem and
raise DataIntegrityError; there is no tie-break.
"""
from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from timesheets.exceptions import DataIntegrityError

from .models import DelegationStatus


@dataclass(frozen=True)
class Approver:
    acting_id: int
    acting_name: str
    on_behalf_of: Optional[int] = None

    @property
    def is_standin(self) -> bool:
        return self.on_behalf_of is not None


@dataclass(frozen=True)
class Delegation:
    id: Optional[int]
    supervisor_id: int
    standin_id: int
    start_date: date
    end_date: date
    status: str = DelegationStatus.ACTIVE
    reason: str = ""
    standin_name: str = ""
    standin_email: str = ""

    def is_active_on(self, day: date) -> bool:
        return self.status == DelegationStatus.ACTIVE and self.start_date <= day <= self.end_date

    @classmethod
    def from_model(cls, obj) -> "Delegation":
        return cls(
            id=obj.pk,
            supervisor_id=obj.supervisor_id,
            standin_id=obj.standin_id,
            start_date=obj.start_date,
            end_date=obj.end_date,
            status=obj.status,
            reason=obj.reason,
            standin_name=obj.standin_name,
            standin_email=obj.standin_email,
        )


class DelegationDirectory(abc.ABC):

    @abc.abstractmethod
    def active_for(self, supervisor_id: int, today: date) -> list[Delegation]:
        """Active delegations of the supervisor covering `today`."""

    @abc.abstractmethod
    def delegating_to(self, standin_id: int, today: date) -> list[Delegation]:
        """Active delegations covering `today` that name this person as stand-in."""

    @abc.abstractmethod
    def display_name(self, person_id: int) -> str:
        ...


class DjangoDelegationDirectory(DelegationDirectory):

    def active_for(self, supervisor_id, today):
        from .models import StandinDelegation
        qs = (
            StandinDelegation.objects.active_on(today)
            .filter(supervisor_id=supervisor_id)
            .select_related("standin")
        )
        return [Delegation.from_model(o) for o in qs]

    def delegating_to(self, standin_id, today):
        from .models import StandinDelegation
        qs = (
            StandinDelegation.objects.active_on(today)
            .filter(standin_id=standin_id)
            .select_related("standin")
        )
        return [Delegation.from_model(o) for o in qs]

    def display_name(self, person_id):
        from people.models import Person
        p = Person.objects.filter(pk=person_id).first()
        return p.display_name if p else f"#{person_id}"


class InMemoryDelegationDirectory(DelegationDirectory):

    def __init__(self, delegations: Iterable[Delegation] = (), names: Optional[dict[int, str]] = None):
        self.delegations = list(delegations)
        self.names = dict(names or {})

    def active_for(self, supervisor_id, today):
        return [d for d in self.delegations if d.supervisor_id == supervisor_id and d.is_active_on(today)]

    def delegating_to(self, standin_id, today):
        return [d for d in self.delegations if d.standin_id == standin_id and d.is_active_on(today)]

    def display_name(self, person_id):
        return self.names.get(person_id, f"#{person_id}")


def resolve_approver(supervisor_id: int, today: date, directory: DelegationDirectory) -> Approver:
    active = directory.active_for(supervisor_id, today)
    if len(active) > 1:
        ids = ", ".join(str(d.id) for d in active)
        raise DataIntegrityError(
            f"Supervisor #{supervisor_id} has {len(active)} overlapping active delegations on "
            f"{today.isoformat()} (ids: {ids})."
        )
    if active:
        d = active[0]
        return Approver(
            acting_id=d.standin_id,
            acting_name=d.standin_name or directory.display_name(d.standin_id),
            on_behalf_of=supervisor_id,
        )
    return Approver(acting_id=supervisor_id, acting_name=directory.display_name(supervisor_id))
