"""SimpLab core package."""

from simplab.catalog import DEFAULT_CATALOG, SubstanceCatalog
from simplab.classifier import classify
from simplab.containers import Container, ContainerManager
from simplab.history import SessionHistory, format_for_external_analysis
from simplab.models import ReactionResult, Substance
from simplab.rules import DEFAULT_RULE_SET, RuleSet
from simplab.session import LabSession
from simplab.settings import LabSettings

__all__ = [
    "DEFAULT_CATALOG",
    "SubstanceCatalog",
    "classify",
    "Container",
    "ContainerManager",
    "SessionHistory",
    "format_for_external_analysis",
    "ReactionResult",
    "Substance",
    "DEFAULT_RULE_SET",
    "RuleSet",
    "LabSession",
    "LabSettings",
]
