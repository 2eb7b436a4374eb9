# backend/barbershop/services/slots/__init__.py
"""
Availability engine.

Rule store: shop configuration → ShopRules (cached in Redis)
Resolver:   ShopRules + date → effective window or Closed(reason)
Projector:  window + catalog + ledger → free slots
Committer:  free slot → booked appointment (store-level uniqueness)
"""

from .config import BookingConfig, get_booking_config
from .rules import Closed, ShopRules, Window
from .rule_store import get_shop_rules, load_shop_rules
from .redis_store import RulesRedisStore
from .invalidator import invalidate_shop_rules
from .resolver import effective_window, resolve_all_staff
from .projector import DayProjection, SlotOption, free_slots, project_day
from .committer import Customer, cancel_booking, commit_booking, read_bookings

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "Closed",
    "ShopRules",
    "Window",
    "get_shop_rules",
    "load_shop_rules",
    "RulesRedisStore",
    "invalidate_shop_rules",
    "effective_window",
    "resolve_all_staff",
    "DayProjection",
    "SlotOption",
    "free_slots",
    "project_day",
    "Customer",
    "cancel_booking",
    "commit_booking",
    "read_bookings",
]
