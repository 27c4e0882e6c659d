"""
Application Layer
=================

Use-case orchestration over the domain services and ports.
"""

from chemverify.application.audit_orchestrator import AuditOrchestrator

__all__ = ["AuditOrchestrator"]
