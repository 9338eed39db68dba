"""Bakery back-office service package.

Holds the activity tracking pipeline, the sliding-window admission control
shared by request handlers and the audit log API built on top of them.
"""
