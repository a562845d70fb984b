"""Application composition layer.

Controllers in this package wire adapters and use cases from the current
settings so that pages never construct transport objects themselves.
"""
