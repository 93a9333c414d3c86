"""
Memora Assistant Backend

Context-aware question classification, prompt assembly and deterministic
fallback answers for a caregiver-support assistant.
"""

__version__ = "1.0.0"
