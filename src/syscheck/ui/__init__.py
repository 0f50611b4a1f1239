"""Live terminal presentation of check results."""

from syscheck.ui.app import App
from syscheck.ui.model import Phase, PresentationState, update
from syscheck.ui.view import View

__all__ = ["App", "Phase", "PresentationState", "View", "update"]
