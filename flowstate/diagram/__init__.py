# flowstate/diagram/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from .base import DiagramFormat, DiagramGenerator, diagram_generator
from .mermaid import MermaidDiagramGenerator
from .plantuml import PlantUMLDiagramGenerator

__all__ = [
    "DiagramFormat",
    "DiagramGenerator",
    "MermaidDiagramGenerator",
    "PlantUMLDiagramGenerator",
    "diagram_generator",
]
