"""ssrgate - server-side rendering gateway with a hookable render pipeline."""

__version__ = "0.1.0"
