"""
Rulebook Core Package

Shared data models, the fixture JSON schema and serialization helpers.
"""

from .models import (
    BlockKind,
    Category,
    CategoryManifest,
    ExampleBlock,
    Impact,
    RuleFile,
    RuleHeader,
    TestFixture,
)

__all__ = [
    "BlockKind",
    "Category",
    "CategoryManifest",
    "ExampleBlock",
    "Impact",
    "RuleFile",
    "RuleHeader",
    "TestFixture",
]
