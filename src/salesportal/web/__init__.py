"""
Flask web layer for the sales portal.
"""
