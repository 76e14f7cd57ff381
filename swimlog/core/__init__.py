"""
Core rules for swim practice tracking.

This module is framework-agnostic - it doesn't import FastAPI or touch
storage. Entity definitions, validators, and time/distance arithmetic
live here so they can be tested in isolation.
"""
