"""Scanning, duplicate detection and cleaning."""
