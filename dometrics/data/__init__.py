"""Data loading and external adapters."""
