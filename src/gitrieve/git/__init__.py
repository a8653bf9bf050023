"""Git integration module for gitrieve."""

from gitrieve.git.identity import resolve_identity
from gitrieve.git.reconciler import BranchReconciler, ReconcileResult

__all__ = ["BranchReconciler", "ReconcileResult", "resolve_identity"]
