"""CMS admin console: state and data-fetching layer for the content platform dashboard."""

__version__ = "0.1.0"
