"""Appointment time-slot allocation and conflict resolution for a veterinary clinic."""
