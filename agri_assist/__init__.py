"""
Agri Assist - an agricultural assistant backed by a hosted language model.
"""

__version__ = "0.1.0"
