"""
Shared Kernel Module
====================

Generic infrastructure used by the poem pipeline (logging).

DO NOT add poem-specific logic to the shared kernel.
"""
