"""Terminal time tracker with a human-readable session history report."""

import logging

__version__ = "0.1.0"

# Applications embedding the package configure their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())
