"""
Core workflows: credential and session stores, the auth workflow,
the access-control gate and the product aggregate builder.
"""
