"""
Upstream API access: HTTP transport with retry and the pagination engine.
"""
