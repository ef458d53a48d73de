__version__ = "1.0.0"

from .app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
