"""
Utilities Package

Helpers shared by the services:
- validation.py: run a Pydantic schema and raise the domain ValidationError
- pagination.py: offset/page arithmetic
"""
