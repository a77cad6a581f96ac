"""Keep inline Jira references in outline notes in sync with the tracker."""

from .plugin import JiraPlugin, RefreshScope
from .services.settings import Settings

__all__ = ["JiraPlugin", "RefreshScope", "Settings"]
__version__ = "0.1.0"
