"""
Core domain models, math primitives, codecs and contracts.

Nothing in this package depends on the engine, the treasury or the
messaging layer.
"""
