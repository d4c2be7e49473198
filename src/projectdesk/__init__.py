"""
ProjectDesk - Multi-tenant project management backend.

This package contains the ProjectDesk resourcing services:
- api: FastAPI REST endpoints
- allocations: Resource allocation rules (overlap, capacity, workload)
- access_control: Authorization policies (JSONLogic)
- storage: Postgres adapter, models and repositories
- platform: Cross-cutting concerns (config, logging, metrics)
"""

__version__ = "0.1.0"
