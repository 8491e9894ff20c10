from __future__ import annotations
import logging
from typing import Sequence
from .conflicts import is_provider_free
from .errors import NotFoundError
from .models import Appointment, NearestSlot, Provider, Slot

logger = logging.getLogger(__name__)


def find_nearest_available(
    slots: Sequence[Slot],
    provider_id: str | None,
    providers: Sequence[Provider],
    appointments: Sequence[Appointment],
) -> NearestSlot:
    """
    Return the earliest free slot, first-fit.

    ``slots`` must already be in chronological order. With a pinned provider the first
    slot where that provider is free wins. Otherwise providers are tried in the order
    given at each slot and the first free one is bound.
    """
    for slot in slots:
        if provider_id is not None:
            if is_provider_free(slot, provider_id, appointments):
                return NearestSlot(slot=slot, provider_id=provider_id)
            continue

        for provider in providers:
            if is_provider_free(slot, provider.id, appointments):
                return NearestSlot(slot=slot, provider_id=provider.id)

    logger.warning("No available slot among %d candidates (provider=%s)", len(slots), provider_id)
    raise NotFoundError("No available slots")
