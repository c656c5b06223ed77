from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from activitylogs.utils import log_activity
from credits.models import Credit


@receiver(post_save, sender=Credit)
def log_credit_activity(sender, instance, created, **kwargs):
    if created:
        action = "Credit Created"
    elif instance.status == Credit.USED:
        action = "Credit Used Up"
    else:
        action = "Credit Updated"
    log_activity(
        member=instance.member,
        action=action,
        source=instance,
        amount=instance.amount_remaining,
        description=instance.description,
    )


@receiver(post_delete, sender=Credit)
def log_credit_removal(sender, instance, **kwargs):
    log_activity(
        member=instance.member,
        action="Credit Removed",
        source=instance,
        amount=instance.amount,
        description=f"Credit {instance.reference} withdrawn after payment edit",
    )
