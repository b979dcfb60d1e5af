"""Control side: label forging and the reconciler that applies it."""

from labhub.control.reconciler import InstanceLabelReconciler

__all__ = ["InstanceLabelReconciler"]
