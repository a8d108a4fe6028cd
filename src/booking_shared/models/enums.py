"""Enumeration types for booking data models."""

from enum import Enum


class PaymentProvider(str, Enum):
    """Payment processing providers."""

    STRIPE = "stripe"
    FORTE = "forte"


class ChargeType(str, Enum):
    """Kind of charge recorded in PaymentIntent metadata.

    The webhook handler branches on this value to decide whether a
    succeeded payment creates a booking or belongs to a recurring schedule.
    """

    SHORT_TERM_FULL_PAYMENT = "short_term_full_payment"
    LONG_TERM_FIRST_PAYMENT = "long_term_first_payment"
    RECURRING_PAYMENT = "recurring_payment"


class AchAccountType(str, Enum):
    """Bank account types accepted for echeck transactions."""

    CHECKING = "checking"
    SAVINGS = "savings"
