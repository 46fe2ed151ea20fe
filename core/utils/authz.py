# core/utils/authz.py
from __future__ import annotations
import logging
import os
from functools import lru_cache
from typing import Set, Dict

import yaml
from django.conf import settings

logger = logging.getLogger("timeflow.auth")

TIMESHEETS_MANAGER = "module:timesheets:manager"


def _acl_path() -> str:
    # BASE_DIR/config/access.yaml unless settings.ACL_CONFIG_PATH says otherwise
    return getattr(settings, "ACL_CONFIG_PATH", os.path.join(settings.BASE_DIR, "config", "access.yaml"))


@lru_cache(maxsize=1)
def _load_acl() -> Dict[str, Set[str]]:
    """
    Parse YAML once. Unreadable or malformed file → no groups (fail-closed).
    Structure returned: {"groups": {<group names>}}
    """
    path = _acl_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"ACL file {path} could not be loaded: {e}")
        return {"groups": set()}
    return {"groups": set((data.get("groups") or {}).keys())}


def declared_groups() -> Set[str]:
    return set(_load_acl()["groups"])


def _group_in_acl(name: str) -> bool:
    groups = _load_acl()["groups"]
    return bool(groups) and name in groups


def is_in_group(user, group_name: str) -> bool:
    """
    True iff user is in the Django group *and* that group is declared in access.yaml.
    Undeclared group (or missing ACL) → False.
    """
    if not (user and user.is_authenticated):
        return False
    if not _group_in_acl(group_name):
        return False
    return user.groups.filter(name=group_name).exists()


def user_roles(user) -> Set[str]:
    """The user's Django groups that access.yaml also declares."""
    if not (user and user.is_authenticated):
        return set()
    return set(user.groups.filter(name__in=declared_groups()).values_list("name", flat=True))


def is_module_manager(user, module_code: str) -> bool:
    """is_module_manager(user, "timesheets") checks "module:timesheets:manager"."""
    return is_in_group(user, f"module:{module_code}:manager")


def is_timesheets_manager(user) -> bool:
    return is_module_manager(user, "timesheets")


def refresh_acl_cache() -> None:
    """Call after changing access.yaml at runtime (tests, management commands)."""
    _load_acl.cache_clear()
