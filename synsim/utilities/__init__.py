"""
Utility functionality for synsim
"""
