"""Desk Booking backend.

Feature modules (sessions, users, rooms, offices, bookings, reservations)
each expose a thin Flask controller over a service and a repository; one
``{operation, data}`` endpoint per resource.
"""
