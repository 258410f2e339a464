from .builder import RawSection, build_document_structure
from .mapper import SectionCoverage, locate_text, map_selection_to_sections
from .models import DocumentNode, DocumentStructure, top_level_section

__all__ = [
    "DocumentNode",
    "DocumentStructure",
    "RawSection",
    "SectionCoverage",
    "build_document_structure",
    "locate_text",
    "map_selection_to_sections",
    "top_level_section",
]
