"""Composition root for wiring dependencies.

API routes and workers obtain services from here so they never construct
infrastructure themselves.
"""
