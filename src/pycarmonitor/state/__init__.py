"""State layer.

The event log and the alert manager are the only components that hold
monitor state derived from inbound frames. Each is owned by exactly one
client and mutated only from dispatch handlers and its own timers.
"""
