"""
Data models for features, regimes, signals, sizing and risk.
"""
