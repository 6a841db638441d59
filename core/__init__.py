"""
Core - Shared infrastructure for Trackboard

This package provides foundational components used by every app:
- Abstract timestamped base model
- Role helpers (super admin detection)
- Policy-backed DRF permission classes
"""
