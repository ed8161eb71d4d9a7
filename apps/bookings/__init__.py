"""Bookings app package.

This app encapsulates the booking and slot admission engine: the slot
grid, the store-backed capacity ledger, admission of new tokens and the
document-verification state machine. Capacity is only ever changed
through conditional updates inside database transactions.
"""
