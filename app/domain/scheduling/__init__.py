"""
Scheduling domain - appointment booking and lifecycle.

- calendar_rules.py: whether a branch accepts bookings on a date
- status_machine.py: allowed status transitions and rejection messages
- service.py: booking, cancellation, completion, staff transitions, queries
"""
