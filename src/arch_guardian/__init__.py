"""
Arch Guardian - Architecture Governance for Layered Codebases

Statically inspects a project snapshot and its change history to enforce
single-source-of-truth for domain constants, strict layering between a
"dumb" presentation layer and the computational layers, absence of magic
numbers, and early detection of repeated-fix structural failures.
"""

__version__ = "0.1.0"
__author__ = "Naman Agarwal"

from .analyzer import ComplianceScore, GovernanceAnalyzer, GovernanceReport
from .config import GuardianConfig, ThresholdConfig, load_config
from .findings import Finding, FindingKind, Severity, calculate_severity
from .governance import GovernanceRegistry, RegistryBuilder, default_registry
from .history import ProjectHistory, load_history
from .snapshot import ProjectSnapshot, load_snapshot

__all__ = [
    "GovernanceAnalyzer",  # Main entry point
    "GovernanceReport",
    "ComplianceScore",
    "GuardianConfig",
    "ThresholdConfig",
    "load_config",
    "Finding",
    "FindingKind",
    "Severity",
    "calculate_severity",
    "GovernanceRegistry",
    "RegistryBuilder",
    "default_registry",
    "ProjectHistory",
    "load_history",
    "ProjectSnapshot",
    "load_snapshot",
]
