"""
Change events for properties.

Every save and delete of a ``Property`` is reported as a ``created``,
``saved`` or ``removed`` event on this module's logger.
"""
import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Property

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Property)
def property_saved(sender, instance, created, **kwargs):
    event = 'created' if created else 'saved'
    logger.info(f"Property {event}: id={instance.pk} name={instance.name!r}")


@receiver(post_delete, sender=Property)
def property_removed(sender, instance, **kwargs):
    logger.info(f"Property removed: id={instance.pk}")
