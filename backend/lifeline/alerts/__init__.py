"""
alerts — SOS alert fan-out to a profile's emergency contacts.

Sub-modules:
    models         — delivery outcome and report structures
    alert_service  — concurrent dispatch and join
"""
