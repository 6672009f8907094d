"""Test package marker so pytest can import shared fixtures deterministically."""
