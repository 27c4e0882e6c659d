"""
ChemVerify
==========

Audits AI-generated chemistry text: extracts claims, validates them for
internal consistency, scores the risk and produces a tamper-evident
audit artifact.
"""

__version__ = "0.1.0"
