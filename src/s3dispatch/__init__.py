"""
S3-style Generic Dispatch Package

Single-dispatch method resolution driven by an ordered class vector
attached to a value, in the manner of the S3 object system.

ARCHITECTURAL GUARANTEE:
------------------------
Class names carry NO hierarchy:
    - No subtype relation between names
    - No interfaces
    - Precedence is the left-to-right order of the class vector

Layers:
    tags        -> attach class vectors to values
    table       -> (generic, class) -> method
    dispatcher  -> walk the class vector, invoke, continue ("next method")
    analyzer    -> read-only explanation of dispatch
"""

__version__ = "0.1.0"
