"""Core domain logic for placement site rotation.

This package contains the rotation calculators and domain models,
isolated from storage and presentation for easy testing and reasoning.
"""
