"""
cmdsynth: Command graph synthesis for recovery operations.

Models a recovery run as a directed graph of commands, derives execution
order and waves, forecasts readiness and risk, and captures windowed
ledger snapshots of that analysis.
"""

__version__ = "0.1.0"
