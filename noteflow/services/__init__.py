# noteflow/services/__init__.py
"""
Business logic services.
"""
