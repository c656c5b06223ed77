import logging

from django.db import transaction

from activitylogs.models import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(member, action, source, actor=None, amount=None, description=None):
    """
    Write an audit entry for ``source``.
    A failure here is logged and never undoes the change being audited.
    """
    try:
        with transaction.atomic():
            return ActivityLog.objects.create(
                actor=actor,
                member=member,
                action=action,
                description=description,
                amount=amount,
                source_model=source.__class__.__name__,
                source_id=str(source.pk),
            )
    except Exception as e:
        logger.error(f"Failed to log {action} for {source.__class__.__name__} {source.pk}: {str(e)}")
        return None
