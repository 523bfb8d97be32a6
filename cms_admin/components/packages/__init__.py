"""
Packages component - package and package-key stores.
"""

from .component import PackageKeyStore, PackageStore

__all__ = ["PackageKeyStore", "PackageStore"]
