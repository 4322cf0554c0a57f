# kyc/signals.py
import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

# sent by the review workflow inside the approval/rejection transaction
# kwargs: verification, reviewer
verification_approved = Signal()
verification_rejected = Signal()


@receiver(verification_approved)
def update_user_trust_cache(sender, verification, **kwargs):
    user = verification.user
    previous = user.trust_levels.get(str(verification.role))
    user.set_cached_level(verification.role, verification.level)
    if previous is not None and previous != verification.level:
        logger.info(
            "Trust cache for user %s role %s changed L%s -> L%s",
            user.pk, verification.role, previous, verification.level,
        )
