# File: core/signals.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from django.contrib.auth.signals import user_logged_in, user_logged_out, user_login_failed
import logging

auth_logger = logging.getLogger('timeflow.auth')


def _ip(request) -> str:
    return request.META.get('REMOTE_ADDR', 'unknown') if request is not None else 'unknown'


def log_user_login(sender, request, user, **kwargs):
    auth_logger.info(f"User '{user.username}' logged in from {_ip(request)}")


def log_user_logout(sender, request, user, **kwargs):
    # user is None when the session had already expired
    name = user.username if user is not None else 'anonymous'
    auth_logger.info(f"User '{name}' logged out")


def log_user_login_failed(sender, credentials, request=None, **kwargs):
    username = credentials.get('username', 'unknown')
    auth_logger.warning(f"Failed login attempt for '{username}' from {_ip(request)}")


user_logged_in.connect(log_user_login)
user_logged_out.connect(log_user_logout)
user_login_failed.connect(log_user_login_failed)
