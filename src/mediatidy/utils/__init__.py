"""Shared utilities for MediaTidy."""
