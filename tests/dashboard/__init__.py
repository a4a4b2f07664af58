"""Tests for the read API."""
