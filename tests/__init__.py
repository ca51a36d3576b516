"""Tests for lfs_compliance."""
