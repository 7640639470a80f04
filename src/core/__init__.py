"""
Core domain models, configuration, and contracts.

This module contains the foundational building blocks of the finite-set
kernel that every construction in src.limits and src.topos depends on.
"""
