# app/services/__init__.py
"""
Service layer root package.

Each subpackage implements application use-cases on top of:

- SQLAlchemy models (app.models.*)
- Repositories (app.repositories.*)
- Pure policy modules (geofence, attendance window, gate pass states)

Services take a SQLAlchemy session, raise ``app.core.exceptions`` types
for every business-rule rejection and own their transaction boundaries.
"""
