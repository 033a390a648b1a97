"""
Sales portal backend: TikTok Live / Product GMV campaign ingestion and reporting.
"""

__version__ = "1.0.0"
