"""
api
===

FastAPI HTTP layer over :pymod:`timestate`.
"""
