"""Playwright page objects."""
