"""Budgeted context primers."""

from projectlens.primer.generator import PrimerGenerator
from projectlens.primer.models import PRESETS, PrimerDocument, PresetWeights

__all__ = ["PRESETS", "PresetWeights", "PrimerDocument", "PrimerGenerator"]
