"""
Data models for the trading pipeline.
"""
