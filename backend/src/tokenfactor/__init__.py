"""
tokenfactor - invoice factoring assets.

Tokenized invoice records, their financial formula engine, and an exchange
trading assets against their reserve amount.
"""

__version__ = "0.1.0"
