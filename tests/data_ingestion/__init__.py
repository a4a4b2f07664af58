"""Tests for the data ingestion package."""
