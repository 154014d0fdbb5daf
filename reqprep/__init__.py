"""reqprep - resolve templated HTTP requests against an environment."""

from reqprep.effective import get_effective_request
from reqprep.stream import resolve_stream

__version__ = "0.1.0"

__all__ = ["get_effective_request", "resolve_stream"]
