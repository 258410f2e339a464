from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import SECTIONS
from redline_kit.annotations.models import AnnotationSet, TrackChangeSet
from redline_kit.errors import ExtractionFailure, StructuralConsistencyError
from redline_kit.pipeline.base import ParsedStructure
from redline_kit.pipeline.config import ExtractionOptions
from redline_kit.pipeline.orchestrator import extract_and_filter_annotations
from redline_kit.scope.models import AnnotationScope, ScopeMode
from redline_kit.structure.builder import RawSection


@pytest.fixture
def host() -> MagicMock:
    host = MagicMock()
    host.fingerprint = AsyncMock(return_value="fp-1")
    host.read_markup = AsyncMock(return_value="<document/>")
    return host


@pytest.fixture
def extractor(annotations: AnnotationSet) -> MagicMock:
    extractor = MagicMock()
    extractor.parse_structure.return_value = ParsedStructure(sections=SECTIONS)
    extractor.extract_comments.return_value = list(annotations.comments)
    extractor.extract_highlights.return_value = list(annotations.highlights)
    extractor.extract_track_changes.return_value = annotations.track_changes
    return extractor


@pytest.mark.asyncio
async def test_extracts_structure_and_annotations(
    host: MagicMock, extractor: MagicMock, annotations: AnnotationSet
) -> None:
    result = await extract_and_filter_annotations(host, extractor)

    assert result.fingerprint == "fp-1"
    assert result.annotations == annotations
    assert result.structure.find("1.2") is not None
    assert result.summary.comments == 2
    assert result.summary.total_annotations == annotations.total
    extractor.extract_comments.assert_called_once_with("<document/>")


@pytest.mark.asyncio
async def test_accepts_async_extractor(host: MagicMock, annotations: AnnotationSet) -> None:
    class AsyncExtractor:
        async def parse_structure(self, markup: str) -> ParsedStructure:
            return ParsedStructure(sections=SECTIONS, recitals="Whereas.")

        async def extract_comments(self, markup: str):
            return list(annotations.comments)

        async def extract_highlights(self, markup: str):
            return []

        async def extract_track_changes(self, markup: str):
            return TrackChangeSet()

    result = await extract_and_filter_annotations(host, AsyncExtractor())
    assert result.annotations.comments == annotations.comments
    assert result.structure.nodes[0].section_number == "recitals"


@pytest.mark.asyncio
async def test_disabled_types_are_not_extracted(
    host: MagicMock, extractor: MagicMock
) -> None:
    options = ExtractionOptions(include_comments=False, include_track_changes=False)
    result = await extract_and_filter_annotations(host, extractor, options=options)

    extractor.extract_comments.assert_not_called()
    extractor.extract_track_changes.assert_not_called()
    assert result.annotations.comments == ()
    assert result.annotations.track_changes == TrackChangeSet()
    assert result.summary.highlights == 1


@pytest.mark.asyncio
async def test_extraction_failure_propagates(host: MagicMock, extractor: MagicMock) -> None:
    extractor.extract_highlights.side_effect = ExtractionFailure("host went away")
    with pytest.raises(ExtractionFailure, match="host went away"):
        await extract_and_filter_annotations(host, extractor)


@pytest.mark.asyncio
async def test_malformed_structure_raises(host: MagicMock, extractor: MagicMock) -> None:
    extractor.parse_structure.return_value = ParsedStructure(
        sections=(RawSection("1", "A."), RawSection("1", "B."))
    )
    with pytest.raises(StructuralConsistencyError):
        await extract_and_filter_annotations(host, extractor)


@pytest.mark.asyncio
async def test_result_filter_applies_scope(host: MagicMock, extractor: MagicMock) -> None:
    result = await extract_and_filter_annotations(host, extractor)
    assert result.filter().summary.total == result.summary.total_annotations
    assert result.filter(AnnotationScope(mode=ScopeMode.INCLUDE_ONLY)).is_empty()
