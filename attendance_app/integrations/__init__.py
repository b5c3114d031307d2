"""Spreadsheet integration: transport, worksheet scanning and reconciliation."""
