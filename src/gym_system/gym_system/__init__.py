"""Gym System package.

Feature modules (members, billing, attendance, configuration, ...) with a thin
Flask controller layer on top of service and repository layers.
"""
