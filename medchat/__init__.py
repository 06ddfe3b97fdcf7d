"""
MedChat API

Backend for a specialty-aware medical chat assistant.
"""
__version__ = "1.0.0"
