from .resolver import ResolvedSession, SessionResolver

__all__ = ["ResolvedSession", "SessionResolver"]
