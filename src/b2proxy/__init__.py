"""b2proxy: read-through proxy for versioned Backblaze B2 objects.

Resolves every stored version of a requested path, purges byte-identical
duplicate uploads and, for PDFs, can compose distinct versions into one
document.
"""

__version__ = "1.0.0"
