"""Tests for the career log package."""
