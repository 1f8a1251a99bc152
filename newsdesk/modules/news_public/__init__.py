from .routes import news_public_bp

__all__ = ['news_public_bp']
