"""Model layer - scan entity sources and resolve them into entity models."""

from __future__ import annotations

from fluent_modelgen.model.builder import ModelBuilder
from fluent_modelgen.model.entity import AttributeModel, ClassRecord, EntityModel, MemberRecord
from fluent_modelgen.model.protocol import Scanner
from fluent_modelgen.model.resolver import TypeResolver
from fluent_modelgen.model.scanner import AstScanner
from fluent_modelgen.model.types import TypeRef

__all__ = [
    "AstScanner",
    "Scanner",
    "TypeResolver",
    "ModelBuilder",
    "ClassRecord",
    "MemberRecord",
    "EntityModel",
    "AttributeModel",
    "TypeRef",
]
