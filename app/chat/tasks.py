"""
Celery tasks for chat app.

This module defines async tasks for:
- Resetting persisted online flags after a restart

The live presence registry is in-process and starts empty, so any
is_online flag still set when the ASGI server comes up is stale.

Related files:
    - services.py: PresenceService
    - presence.py: PresenceRegistry

Usage:
    from chat.tasks import reset_online_flags

    reset_online_flags.delay()
"""

import logging

from celery import shared_task

from chat.services import PresenceService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def reset_online_flags(self) -> int:
    """
    Mark every user offline.

    Returns:
        Number of users whose flag was cleared
    """
    updated = PresenceService.reset_all()
    logger.info(f"reset_online_flags cleared {updated} users")
    return updated
