"""Dashboard session tying the form, the store and the table view together."""

from patient_dashboard.dashboard.session import DashboardSession, DraftForm, SubmitResult

__all__ = ["DashboardSession", "DraftForm", "SubmitResult"]
