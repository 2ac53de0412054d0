"""Celery tasks for the availability engine."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .application.engine import build_engine

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (запускаются автоматически через Celery Beat)
# ============================================================================

@shared_task(name="availability.expire_stale_holds")
def expire_stale_holds() -> dict[str, int]:
    """
    Возвращает в статус available дни, удержание которых истекло.

    Запускается каждые AVAILABILITY_SWEEP_INTERVAL_SECONDS через Celery Beat.

    Returns:
        dict: {"cleaned_count": количество освобождённых дней}
    """
    result = build_engine().expire_holds()
    if result.cleaned_count:
        logger.info(f"Sweep released {result.cleaned_count} expired hold(s)")
    return {"cleaned_count": result.cleaned_count}


@shared_task(name="availability.handle_booking_transition")
def handle_booking_transition(property_id: int, booking_ref: str, status: str) -> dict | None:
    """Реакция на смену статуса бронирования во внешнем сервисе."""
    result = build_engine().handle_booking_transition(property_id, booking_ref, status)
    return result.to_dict() if result else None
