"""
Cumuli Test Suite

Test organization:
- unit/ - Unit tests for individual components
- fixtures/ - In-memory directory and sample graphs
"""
