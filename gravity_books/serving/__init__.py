"""
Serving Layer Module
"""
