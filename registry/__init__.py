"""Registry application for the clinic backend.

This package holds the hospital/OPD/doctor/patient registry, the
prescription assembly services, the freehand annotation engine and the
API views built on top of them.
"""
