"""Referral subsystem: codes, settings, signup credit, reconciliation and reporting."""
