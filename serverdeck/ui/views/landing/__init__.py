from .view import LandingView

__all__ = ["LandingView"]
