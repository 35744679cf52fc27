"""Flask JSON API over product_search.Engine."""
from .web import app, attach_engine

__all__ = ["app", "attach_engine"]
