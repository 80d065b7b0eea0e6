"""Cache Relocator — move package-manager caches onto a faster volume."""

__version__ = "0.1.0"
