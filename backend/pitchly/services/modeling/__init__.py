"""
modeling — Pure valuation engines.

No module in this package performs I/O; every function maps a Quote plus
assumptions to a result dataclass.
"""
