"""
kick - automates common server setup tasks.

`kick ssh` switches the local SSH server to public-key authentication.
"""

__version__ = "0.1.0"

from .cli import main

__all__ = [
    "__version__",
    "main",
]
