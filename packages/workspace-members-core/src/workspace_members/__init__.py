"""Workspace members - role reconciliation core library."""

__all__ = ["ActingUser", "ReconcileConfig", "ReconcileResult", "WorkspaceMemberReconciler", "WorkspaceRole"]
__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports - keep `import workspace_members` free of structlog/pydantic at startup."""
    if name in ("ReconcileConfig", "WorkspaceRole"):
        from workspace_members import config

        return getattr(config, name)
    if name in ("ActingUser", "ReconcileResult", "WorkspaceMemberReconciler"):
        from workspace_members import service

        return getattr(service, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
