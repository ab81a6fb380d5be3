"""
EcoPulse - Economic news and market index backend

Gemini search-grounded news, market indices and deep insight reports,
guarded by a small client-side reliability layer.
"""

__version__ = "1.0.0"
