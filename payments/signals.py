from django.db.models.signals import post_save
from django.dispatch import receiver

from activitylogs.utils import log_activity
from payments.models import Payment


@receiver(post_save, sender=Payment)
def log_payment_activity(sender, instance, created, **kwargs):
    log_activity(
        member=instance.member,
        action="Payment Recorded" if created else "Payment Updated",
        source=instance,
        actor=instance.recorded_by,
        amount=instance.amount,
        description=f"{instance.payment_method} payment {instance.identity}",
    )
