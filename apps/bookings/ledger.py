"""
Capacity Ledger

Store-backed token counters per (department, service, date, slot).
Every change is a conditional UPDATE evaluated by the database, so two
workers racing for the last token cannot both win: the loser's UPDATE
matches zero rows.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.bookings.domain.entities import PriorityType
from apps.bookings.domain.exceptions import AdmissionFailure
from apps.bookings.domain.slots import Slot
from apps.bookings.models import DailyLedger, SlotHold, SlotLedger, TokenSequence
from apps.departments.domain import TokenConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotKey:
    department_id: int
    service_id: int
    date: date
    slot_time: str

    def __str__(self):
        return f"{self.department_id}/{self.service_id}/{self.date}/{self.slot_time}"


@dataclass(frozen=True)
class ReservationResult:
    granted: bool
    token_number: Optional[int] = None
    failure_reason: Optional[AdmissionFailure] = None
    hold: Optional[SlotHold] = None

    @classmethod
    def refused(cls, reason: AdmissionFailure) -> 'ReservationResult':
        return cls(granted=False, failure_reason=reason)


@dataclass(frozen=True)
class SlotUsage:
    regular_consumed: int = 0
    priority_consumed: int = 0

    @property
    def consumed(self) -> int:
        return self.regular_consumed + self.priority_consumed


class _Refused(Exception):
    """Internal signal that rolls the reservation savepoint back"""

    def __init__(self, reason: AdmissionFailure):
        super().__init__(reason.value)
        self.reason = reason


class CapacityLedger:
    """
    Atomic reserve/release of slot capacity

    Must be called inside an outer transaction (the admission unit of
    work); ``reserve`` opens its own savepoint so a refusal leaves no
    trace. Database errors propagate unchanged to the caller, which owns
    the retry policy.
    """

    def reserve(
        self,
        key: SlotKey,
        priority_type: PriorityType,
        slot: Slot,
        token_config: TokenConfig,
        *,
        priority_allowed: bool = True,
    ) -> ReservationResult:
        try:
            with transaction.atomic():
                # Lock order is daily then slot; release follows it too.
                self._consume_daily(key, token_config)

                if priority_type.is_priority and not (token_config.allow_priority_tokens and priority_allowed):
                    raise _Refused(AdmissionFailure.PRIORITY_NOT_ALLOWED)

                self._consume_slot(key, priority_type, slot)
                token_number = self._next_token_number(key)
                hold = SlotHold.objects.create(
                    department_id=key.department_id,
                    service_id=key.service_id,
                    date=key.date,
                    slot_time=key.slot_time,
                    priority_type=priority_type.value,
                    token_number=token_number,
                )
        except _Refused as refused:
            logger.info("Reservation refused at %s: %s", key, refused.reason.value)
            return ReservationResult.refused(refused.reason)

        logger.info("Reserved token %s at %s (%s)", token_number, key, priority_type.value)
        return ReservationResult(granted=True, token_number=token_number, hold=hold)

    def release(self, hold: SlotHold) -> bool:
        """
        Give the hold's capacity back

        Only the call that flips ``released_at`` decrements the counters;
        later calls are no-ops and return False.
        """
        released_at = timezone.now()
        with transaction.atomic():
            flipped = SlotHold.objects.filter(pk=hold.pk, released_at__isnull=True).update(released_at=released_at)
            if not flipped:
                logger.info("Hold %s already released", hold.pk)
                return False

            # Lock order is daily then slot, the same as reserve.
            DailyLedger.objects.filter(
                department_id=hold.department_id,
                date=hold.date,
                consumed__gt=0,
            ).update(consumed=F('consumed') - 1)
            counter = 'priority_consumed' if hold.is_priority else 'regular_consumed'
            SlotLedger.objects.filter(
                department_id=hold.department_id,
                service_id=hold.service_id,
                date=hold.date,
                slot_time=hold.slot_time,
                **{f'{counter}__gt': 0},
            ).update(**{counter: F(counter) - 1})

        hold.released_at = released_at
        logger.info("Released hold %s (token %s) at %s %s", hold.pk, hold.token_number, hold.date, hold.slot_time)
        return True

    # ----- reads -----

    def slot_usage(self, department_id: int, service_id: int, day: date) -> Dict[str, SlotUsage]:
        """Live consumed counts per slot label; not locked, may lag concurrent writers"""
        rows = SlotLedger.objects.filter(department_id=department_id, service_id=service_id, date=day)
        return {
            row.slot_time: SlotUsage(row.regular_consumed, row.priority_consumed)
            for row in rows
        }

    def daily_consumed(self, department_id: int, day: date) -> int:
        row = DailyLedger.objects.filter(department_id=department_id, date=day).first()
        return row.consumed if row else 0

    # ----- conditional updates -----

    def _consume_daily(self, key: SlotKey, token_config: TokenConfig):
        row, _ = DailyLedger.objects.get_or_create(department_id=key.department_id, date=key.date)
        limit = token_config.max_daily_tokens
        rows = DailyLedger.objects.filter(pk=row.pk)

        if limit is None:
            rows.update(consumed=F('consumed') + 1)
            return

        if rows.filter(consumed__lt=limit).update(consumed=F('consumed') + 1):
            return

        if token_config.auto_stop_on_overload:
            raise _Refused(AdmissionFailure.DAILY_LIMIT_REACHED)

        logger.warning(
            "Daily token limit %s exceeded for department %s on %s; auto-stop is off, admitting",
            limit, key.department_id, key.date,
        )
        rows.update(consumed=F('consumed') + 1)

    def _consume_slot(self, key: SlotKey, priority_type: PriorityType, slot: Slot):
        row, _ = SlotLedger.objects.get_or_create(
            department_id=key.department_id,
            service_id=key.service_id,
            date=key.date,
            slot_time=key.slot_time,
        )
        rows = SlotLedger.objects.filter(pk=row.pk)

        # Priority and regular pools never borrow from each other.
        if priority_type.is_priority:
            updated = rows.filter(priority_consumed__lt=slot.priority_capacity).update(
                priority_consumed=F('priority_consumed') + 1
            )
            if not updated:
                raise _Refused(AdmissionFailure.PRIORITY_QUOTA_EXHAUSTED)
        else:
            updated = rows.filter(regular_consumed__lt=slot.regular_capacity).update(
                regular_consumed=F('regular_consumed') + 1
            )
            if not updated:
                raise _Refused(AdmissionFailure.SLOT_FULL)

    def _next_token_number(self, key: SlotKey) -> int:
        sequence, _ = TokenSequence.objects.get_or_create(
            department_id=key.department_id,
            service_id=key.service_id,
            date=key.date,
        )
        TokenSequence.objects.filter(pk=sequence.pk).update(last_number=F('last_number') + 1)
        sequence.refresh_from_db(fields=['last_number'])
        return sequence.last_number
