from repofolio.config.settings import Settings

__all__ = ["Settings"]
