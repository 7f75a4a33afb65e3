"""Main application entry point.

Run with ``uvicorn formpipe.main:app``.
"""

from formpipe.core.application import create_application
from formpipe.core.logging import configure_logging

configure_logging()

app = create_application()
