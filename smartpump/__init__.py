"""
Smart Pump operator client
"""
__version__ = '1.0.0'
