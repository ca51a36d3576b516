"""End-to-end harness scenarios.

These tests run the complete harness, fixture construction included, against
an in-process fake Git LFS server and check status lines, reports and exit
codes.
"""
