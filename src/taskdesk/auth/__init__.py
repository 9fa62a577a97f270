"""
Client side of the external auth API (session lookup only).
"""
