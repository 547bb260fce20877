from abc import ABC, abstractmethod


class Page(ABC):
    """Abstract base class for UI pages."""

    view: str

    @abstractmethod
    def render(self):
        pass

    def on_leave(self):
        """Called when navigation moves away from this page."""
        pass
