# File: admin_core/__init__.py
"""
Multi-language entity replication and default-singleton core for the
crowdfunding admin backend.
"""

__version__ = "0.1.0"
