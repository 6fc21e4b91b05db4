"""
Lifecycle engine operations; every function takes the session and the caller identity explicitly
"""
