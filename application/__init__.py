"""
Application layer for the workout log service.

This package contains:
- ports/: Abstract collaborator interfaces (what the core needs)
"""
