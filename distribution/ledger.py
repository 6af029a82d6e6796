"""
Dealer Ledger for AutoLead SA.

Applies distribution outcomes to dealer load and billing counters.
The apply_* functions are pure; DealerLedger serialises read-modify-write
cycles per dealer and persists through a DealerStore.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import AsyncExitStack
from dataclasses import replace
from datetime import date
from typing import Dict, Optional

from .models import Dealer

logger = logging.getLogger(__name__)


class DealerNotFoundError(LookupError):
    """Raised when a ledger update targets an unknown dealer."""

    def __init__(self, dealer_id: str):
        super().__init__(f"Dealer not found: {dealer_id}")
        self.dealer_id = dealer_id


def apply_assignment(dealer: Dealer) -> Dealer:
    """Charge one lead to a dealer: load +1, unbilled += cost per lead."""
    billing = replace(
        dealer.billing,
        current_unbilled_amount=(dealer.billing.current_unbilled_amount or 0) + (dealer.billing.cost_per_lead or 0),
    )
    return replace(dealer, leads_assigned=(dealer.leads_assigned or 0) + 1, billing=billing)


def apply_release(dealer: Dealer) -> Dealer:
    """Take one lead back from a dealer; counters never go below zero."""
    unbilled = (dealer.billing.current_unbilled_amount or 0) - (dealer.billing.cost_per_lead or 0)
    billing = replace(dealer.billing, current_unbilled_amount=max(0.0, unbilled))
    return replace(dealer, leads_assigned=max(0, (dealer.leads_assigned or 0) - 1), billing=billing)


def apply_billing_close(dealer: Dealer, billed_on: Optional[date] = None) -> Dealer:
    """Move the unbilled amount into total spent and reset it."""
    billed_on = billed_on or date.today()
    unbilled = dealer.billing.current_unbilled_amount or 0
    billing = replace(
        dealer.billing,
        total_spent=(dealer.billing.total_spent or 0) + unbilled,
        current_unbilled_amount=0.0,
        last_billed_date=billed_on.isoformat(),
    )
    return replace(dealer, billing=billing)


class DealerStore(ABC):
    """Persistence seam used by the ledger."""

    @abstractmethod
    async def get_for_update(self, dealer_id: str) -> Optional[Dealer]:
        """Load a dealer, locking its row where the backend supports it."""
        pass

    @abstractmethod
    async def save_counters(self, dealer: Dealer) -> None:
        """Persist leads_assigned and billing fields of a dealer."""
        pass


class DealerLedger:
    """
    Single logical writer of dealer load and billing counters.

    Concurrent updates for the same dealer are serialised with a
    per-dealer asyncio.Lock; the store adds row locking on top.
    """

    def __init__(self, store: DealerStore, locks: Optional[Dict[str, asyncio.Lock]] = None):
        """
        Args:
            store: Dealer persistence
            locks: Per-dealer lock table; pass a shared one when a ledger
                is built per request around a fresh session
        """
        self.store = store
        self._locks: Dict[str, asyncio.Lock] = locks if locks is not None else defaultdict(asyncio.Lock)

    async def _update(self, dealer_id: str, change) -> Dealer:
        dealer = await self.store.get_for_update(dealer_id)
        if dealer is None:
            raise DealerNotFoundError(dealer_id)
        updated = change(dealer)
        await self.store.save_counters(updated)
        return updated

    async def record_assignment(self, dealer_id: str) -> Dealer:
        """
        Record a new lead assigned to a dealer.

        Args:
            dealer_id: Dealer receiving the lead

        Returns:
            Dealer with updated counters
        """
        async with self._locks[dealer_id]:
            dealer = await self._update(dealer_id, apply_assignment)
        logger.info(
            f"Ledger: dealer {dealer_id} assigned lead "
            f"(load={dealer.leads_assigned}, unbilled={dealer.billing.current_unbilled_amount:.2f})"
        )
        return dealer

    async def record_reassignment(
        self,
        old_dealer_id: Optional[str],
        new_dealer_id: str,
    ) -> Optional[Dealer]:
        """
        Move a lead between dealers.

        Args:
            old_dealer_id: Previous dealer, None if the lead was unassigned
            new_dealer_id: Dealer taking over the lead

        Returns:
            Updated new dealer, or None when the dealer did not change
        """
        if old_dealer_id == new_dealer_id:
            return None
        if not old_dealer_id:
            return await self.record_assignment(new_dealer_id)

        # Fixed lock order so opposite reassignments cannot deadlock
        async with AsyncExitStack() as stack:
            for dealer_id in sorted((old_dealer_id, new_dealer_id)):
                await stack.enter_async_context(self._locks[dealer_id])
            new_dealer = await self._update(new_dealer_id, apply_assignment)
            await self._update(old_dealer_id, apply_release)

        logger.info(f"Ledger: lead moved from dealer {old_dealer_id} to {new_dealer_id}")
        return new_dealer

    async def close_billing_cycle(self, dealer_id: str, billed_on: Optional[date] = None) -> Dealer:
        """Settle a dealer's unbilled amount."""
        async with self._locks[dealer_id]:
            dealer = await self._update(dealer_id, lambda d: apply_billing_close(d, billed_on))
        logger.info(f"Ledger: billing closed for dealer {dealer_id} (total={dealer.billing.total_spent:.2f})")
        return dealer
