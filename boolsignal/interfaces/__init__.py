"""
Structural types shared across the package: protocols for observers and
schedulers, and the small enums used as operator options.
"""
