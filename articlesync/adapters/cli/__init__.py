"""Command-line interface adapter.

Maps import/export commands to the driving ports.
"""
