"""
Consumers package
"""
